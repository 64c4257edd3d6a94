import datetime
import struct

import pytest

from img2ans.ansi import (
    SAUCE_SIZE,
    AnsiOptions,
    cga_bg_sgr,
    cga_fg_sgr,
    convert_blocks_to_ans,
    encode_blocks,
    encode_sauce,
)
from img2ans.converter import Block
from img2ans.errors import ConversionError
from img2ans.fonts import ibm_vga, vga50


def _block(fg=(1, 2, 3, 255), bg=(4, 5, 6, 255), codepoint=177, cga_fg=9, cga_bg=1, column=0, row=0):
    return Block(fg=fg, bg=bg, codepoint=codepoint, cga_fg=cga_fg, cga_bg=cga_bg, column=column, row=row)


def test_truecolor_writes_background_then_foreground() -> None:
    data = encode_blocks([_block()])

    assert data == b"\x1b[0;4;5;6t\x1b[1;1;2;3t\xb1"


def test_truecolor_without_background() -> None:
    data = encode_blocks([_block(fg=(255, 0, 0, 255), bg=None, codepoint=219, cga_bg=None)])

    assert data == b"\x1b[1;255;0;0t\xdb"


def test_modern_sgr_truecolor() -> None:
    data = encode_blocks([_block()], AnsiOptions(modern_sgr=True))

    assert data == b"\x1b[48;2;4;5;6m\x1b[38;2;1;2;3m\xb1"


@pytest.mark.parametrize(
    "index, fg, bg",
    [(0, "30", "40"), (4, "34", "44"), (7, "37", "47"), (8, "1;30", "5;40"), (15, "1;37", "5;47")],
)
def test_cga_sgr_codes(index, fg, bg) -> None:
    assert cga_fg_sgr(index) == fg
    assert cga_bg_sgr(index) == bg


def test_cga_sgr_rejects_out_of_range() -> None:
    with pytest.raises(ConversionError):
        cga_fg_sgr(16)


def test_cga_stream() -> None:
    blocks = [_block(), _block(bg=None, cga_fg=4, cga_bg=None, codepoint=219)]

    data = encode_blocks(blocks, AnsiOptions(truecolor=False))

    assert data == b"\x1b[0;41;1;31m\xb1\x1b[0;34m\xdb"


def test_sauce_layout() -> None:
    sauce = encode_sauce(
        1234,
        80,
        25,
        "IBM VGA",
        title="Title",
        author="Me",
        group="Group",
        date=datetime.date(1994, 7, 1),
    )

    assert len(sauce) == SAUCE_SIZE == 129
    assert sauce[0] == 0x1A
    assert sauce[1:8] == b"SAUCE00"
    assert sauce[8:43] == b"Title".ljust(35)
    assert sauce[43:63] == b"Me".ljust(20)
    assert sauce[63:83] == b"Group".ljust(20)
    assert sauce[83:91] == b"19940701"
    assert struct.unpack("<I", sauce[91:95]) == (1234,)
    assert sauce[95] == 1
    assert sauce[96] == 1
    assert struct.unpack("<HH", sauce[97:101]) == (80, 25)
    assert sauce[105] == 0
    assert sauce[106] & 0x01 == 0
    assert sauce[107:129] == b"IBM VGA".ljust(22, b"\x00")


def test_sauce_sets_ice_flag() -> None:
    sauce = encode_sauce(0, 1, 1, "IBM VGA50", ice_colors=True, date=datetime.date(2024, 1, 1))

    assert sauce[106] & 0x01 == 0x01


def test_sauce_truncates_long_text_with_warning() -> None:
    with pytest.warns(UserWarning):
        sauce = encode_sauce(0, 1, 1, "IBM VGA", title="x" * 40, date=datetime.date(2024, 1, 1))

    assert sauce[8:43] == b"x" * 35


def test_sauce_rejects_oversized_grid() -> None:
    with pytest.raises(ConversionError):
        encode_sauce(0, 70000, 1, "IBM VGA")


def test_ans_output_appends_trailer() -> None:
    blocks = [
        _block(column=0, row=0),
        _block(column=1, row=0),
        _block(column=0, row=1),
        _block(column=1, row=1),
    ]
    options = AnsiOptions(date=datetime.date(2024, 1, 1))

    data = convert_blocks_to_ans(blocks, vga50(), 2, options)
    stream = encode_blocks(blocks, options)

    assert data[: len(stream)] == stream
    sauce = data[len(stream) :]
    assert len(sauce) == 129
    assert struct.unpack("<I", sauce[91:95]) == (len(stream),)
    assert struct.unpack("<HH", sauce[97:101]) == (2, 2)
    assert sauce[107:116] == b"IBM VGA50"


def test_cga_output_marks_bright_backgrounds() -> None:
    blocks = [_block(cga_bg=12)]
    options = AnsiOptions(truecolor=False, date=datetime.date(2024, 1, 1))

    data = convert_blocks_to_ans(blocks, ibm_vga(), 1, options)

    assert b"\x1b[0;5;44;1;31m" in data
    assert data[-129 + 106] & 0x01 == 0x01


def test_ans_output_rejects_partial_rows() -> None:
    with pytest.raises(ConversionError):
        convert_blocks_to_ans([_block()] * 3, ibm_vga(), 2)
