import pytest
from PIL import Image

from img2ans.fonts import Font, get_font, ibm_vga, vga50


@pytest.mark.parametrize("factory, name, height", [(ibm_vga, "IBM VGA", 16), (vga50, "IBM VGA50", 8)])
def test_bundled_fonts_cover_256_glyphs(factory, name, height) -> None:
    font = factory()

    assert font.name == name
    assert str(font) == name
    assert font.width == 8
    assert font.height == height
    assert len(font.bits) == 256 * font.width * font.height
    assert set(font.bits) <= {0, 1}


def test_fonts_are_loaded_once() -> None:
    assert ibm_vga() is ibm_vga()
    assert vga50() is vga50()
    assert get_font("vga") is ibm_vga()
    assert get_font("VGA50") is vga50()


def test_get_font_rejects_unknown_key() -> None:
    with pytest.raises(ValueError):
        get_font("topaz")


def test_block_glyph_bits() -> None:
    font = ibm_vga()

    assert list(font.bits_for(219)) == [1] * 128
    assert list(font.bits_for(32)) == [0] * 128
    # 221 is the left half block: four lit pixels then four dark ones per row.
    assert list(font.bits_for(221)) == [1, 1, 1, 1, 0, 0, 0, 0] * 16
    assert list(font.bits_for(222)) == [0, 0, 0, 0, 1, 1, 1, 1] * 16
    assert list(vga50().bits_for(177)) == [0, 1, 0, 1, 0, 1, 0, 1, 1, 0, 1, 0, 1, 0, 1, 0] * 4


def test_from_bytes_reads_msb_first() -> None:
    data = bytearray(256 * 8)
    data[65 * 8] = 0b10000001
    font = Font.from_bytes(bytes(data), "TEST")

    assert font.height == 8
    assert list(font.bits_for(65)[:8]) == [1, 0, 0, 0, 0, 0, 0, 1]
    assert set(font.bits_for(65)[8:]) == {0}
    assert font.mask(65) == 0b10000001 << 56


def test_from_bytes_rejects_bad_sizes() -> None:
    with pytest.raises(ValueError):
        Font.from_bytes(bytes(100), "TEST")
    with pytest.raises(ValueError):
        Font.from_bytes(bytes(256 * 12), "TEST")


def test_font_name_must_fit_sauce_field() -> None:
    with pytest.raises(ValueError):
        Font.from_bytes(bytes(256 * 8), "A FONT NAME THAT IS TOO LONG")


def test_render_uses_fg_on_set_bits() -> None:
    font = ibm_vga()
    tile = font.render(221, (255, 0, 0, 255), (0, 0, 255, 255))

    assert tile.mode == "RGBA"
    assert tile.size == (8, 16)
    assert tile.getpixel((0, 0)) == (255, 0, 0, 255)
    assert tile.getpixel((3, 15)) == (255, 0, 0, 255)
    assert tile.getpixel((4, 0)) == (0, 0, 255, 255)
    assert tile.getpixel((7, 15)) == (0, 0, 255, 255)


def test_render_defaults_background_to_black() -> None:
    tile = vga50().render(220, (10, 20, 30))

    assert tile.getpixel((0, 0)) == (0, 0, 0, 255)
    assert tile.getpixel((0, 7)) == (10, 20, 30, 255)


def test_blit_writes_at_offset() -> None:
    font = vga50()
    target = Image.new("RGBA", (16, 8))
    font.blit(target, font.render(219, (1, 2, 3)), 8, 0)

    assert target.getpixel((7, 0)) == (0, 0, 0, 0)
    assert target.getpixel((8, 0)) == (1, 2, 3, 255)
    assert target.getpixel((15, 7)) == (1, 2, 3, 255)


def test_blit_rejects_out_of_bounds() -> None:
    font = vga50()
    target = Image.new("RGBA", (16, 8))
    tile = font.render(219, (1, 2, 3))

    with pytest.raises(ValueError):
        font.blit(target, tile, 9, 0)
    with pytest.raises(ValueError):
        font.blit(target, tile, 0, 1)
