"""Core conversion logic: image in, list of character cells out."""

# Pipeline
# Step           | Module   | Notes
# ---------------|----------|---------------------------------------------------
# Pre-process    | here     | optional alpha compositing, hue, gamma, contrast
# Extract tiles  | tiles    | Lanczos resize to columns*W x rows*H, row-major
# Quantize       | tiles    | median cut to <= 2 colors per cell
# Match glyph    | matcher  | max pixel agreement over CP437 glyph bitmasks
# Assemble       | here     | Block with truecolor and CGA color roles

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageEnhance

from .cga import Color, cga_nearest, opaque
from .errors import ConversionError
from .fonts import Font, get_font
from .matcher import FULL_BLOCK, find_closest_glyph
from .tiles import QuantizedTile, TileExtractor, quantize_tile

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class Block:
    """One character cell of the output."""

    fg: Color
    bg: Optional[Color]
    codepoint: int
    cga_fg: int
    cga_bg: Optional[int]
    column: int
    row: int


@dataclass
class ConvertOptions:
    """Options for cell layout, glyph selection and pre-processing."""

    columns: int = 80
    font: str = "vga"  # vga (8x16), vga50 (8x8)
    restrict: bool = False
    corrected_match: bool = False
    background_color: RGB | None = None
    gamma: float | None = None
    contrast: float | None = None
    hue_shift: float | None = None


def parse_color(text: str) -> RGB:
    text = text.strip()
    if text.startswith("#"):
        text = text[1:]
    if "," in text:
        parts = text.split(",")
    else:
        parts = [text[i : i + 2] for i in range(0, len(text), 2)]
    if len(parts) != 3:
        raise ConversionError("Color must have exactly three components")
    values = []
    for part in parts:
        part = part.strip()
        base = 10 if "," in text else 16
        try:
            values.append(int(part, base))
        except ValueError as exc:
            raise ConversionError(f"Invalid color component: {part}") from exc
    if any(not (0 <= v <= 255) for v in values):
        raise ConversionError("Color components must be between 0 and 255")
    return tuple(values)  # type: ignore[return-value]


def apply_preprocessing(image: Image.Image, options: ConvertOptions) -> Image.Image:
    """Flatten to RGB and apply the optional tone adjustments."""

    if options.background_color is not None and "A" in image.getbands():
        rgba = image.convert("RGBA")
        canvas = Image.new("RGBA", rgba.size, opaque(options.background_color))
        image = Image.alpha_composite(canvas, rgba)

    image = image.convert("RGB")

    if options.hue_shift is not None:
        if options.hue_shift < -180 or options.hue_shift > 180:
            raise ConversionError("Hue shift must be between -180 and 180 degrees")
        shift = int(round(options.hue_shift * 255.0 / 360.0))
        h, s, v = image.convert("HSV").split()
        h = h.point([(value + shift) % 256 for value in range(256)])
        image = Image.merge("HSV", (h, s, v)).convert("RGB")

    if options.gamma is not None:
        if options.gamma <= 0:
            raise ConversionError("Gamma must be greater than 0")
        lut = [
            max(0, min(255, int(round((value / 255.0) ** options.gamma * 255))))
            for value in range(256)
        ]
        image = image.point(lut * 3)

    if options.contrast is not None:
        if options.contrast < 0:
            raise ConversionError("Contrast must be zero or greater")
        image = ImageEnhance.Contrast(image).enhance(options.contrast)

    return image


def assemble_block(tile: QuantizedTile, font: Font, restrict: bool, corrected: bool = False) -> Block:
    if tile.is_uniform:
        fg = tile.palette[0]
        return Block(
            fg=fg,
            bg=None,
            codepoint=FULL_BLOCK,
            cga_fg=cga_nearest(fg),
            cga_bg=None,
            column=tile.column,
            row=tile.row,
        )

    match = find_closest_glyph(font, tile.indices, restrict=restrict, corrected=corrected)
    fg = tile.palette[match.fg]
    bg = tile.palette[match.bg]
    return Block(
        fg=fg,
        bg=bg,
        codepoint=match.codepoint,
        cga_fg=cga_nearest(fg),
        cga_bg=cga_nearest(bg),
        column=tile.column,
        row=tile.row,
    )


def convert(
    image: Image.Image,
    font: Font,
    columns: int,
    restrict: bool = False,
    corrected: bool = False,
) -> List[Block]:
    """Convert ``image`` into ``columns x rows`` blocks in row-major order."""

    tiles = TileExtractor(image, columns, font.width, font.height)
    return [assemble_block(quantize_tile(tile), font, restrict, corrected) for tile in tiles]


def convert_image(image: Image.Image, options: ConvertOptions | None = None) -> List[Block]:
    options = options or ConvertOptions()
    font = get_font(options.font)
    image = apply_preprocessing(image, options)
    return convert(
        image,
        font,
        options.columns,
        restrict=options.restrict,
        corrected=options.corrected_match,
    )


def convert_path(path: str | Path, options: ConvertOptions | None = None) -> List[Block]:
    path = Path(path)
    try:
        with Image.open(path) as img:
            return convert_image(img, options)
    except FileNotFoundError as exc:
        raise ConversionError(f"Input file not found: {path}") from exc
    except OSError as exc:
        raise ConversionError(f"Failed to read image: {path}") from exc


def grid_rows(blocks: Sequence[Block], columns: int) -> int:
    if columns < 1:
        raise ConversionError(f"Column count must be at least 1, got {columns}")
    rows, remainder = divmod(len(blocks), columns)
    if remainder:
        raise ConversionError(
            f"{len(blocks)} blocks do not fill a grid of {columns} columns"
        )
    return rows


def convert_blocks_to_image(blocks: Sequence[Block], font: Font, columns: int) -> Image.Image:
    """Draw blocks back into an RGBA image using the font bitmaps."""

    rows = grid_rows(blocks, columns)
    image = Image.new("RGBA", (columns * font.width, rows * font.height))
    for block in blocks:
        tile = font.render(block.codepoint, block.fg, block.bg)
        font.blit(image, tile, block.column * font.width, block.row * font.height)
    return image
