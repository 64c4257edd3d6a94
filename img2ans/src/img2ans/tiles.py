"""Cutting a resampled image into character cells and reducing each to two colors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from PIL import Image

from .cga import Color, opaque
from .errors import ConversionError

_SWAP = bytes.maketrans(b"\x00\x01", b"\x01\x00")


@dataclass
class Tile:
    column: int
    row: int
    image: Image.Image


@dataclass
class QuantizedTile:
    """A cell reduced to one or two colors.

    ``indices`` holds one palette index (0 or 1) per pixel in row-major order.
    """

    column: int
    row: int
    width: int
    height: int
    palette: Tuple[Color, ...]
    indices: bytes

    @property
    def is_uniform(self) -> bool:
        return len(self.palette) == 1


def calculate_rows(image_size: Tuple[int, int], columns: int, width: int, height: int) -> int:
    """Number of cell rows once the image is scaled to ``columns`` cells across.

    Equivalent to ``ceil(width * columns / src_w * src_h / height)`` without
    floating point rounding.
    """

    src_w, src_h = image_size
    numerator = width * columns * src_h
    denominator = src_w * height
    return -(-numerator // denominator)


class TileExtractor:
    """Row-major, single-pass iterator over the cells of a resampled image."""

    def __init__(self, image: Image.Image, columns: int, width: int, height: int):
        if columns < 1:
            raise ConversionError(f"Column count must be at least 1, got {columns}")
        if width < 1 or height < 1:
            raise ConversionError(f"Cell size must be positive, got {width}x{height}")
        if image.width < 1 or image.height < 1:
            raise ConversionError("Input image is empty")

        self.columns = columns
        self.width = width
        self.height = height
        self.rows = calculate_rows(image.size, columns, width, height)
        target = (width * columns, height * self.rows)
        self.image = image.convert("RGB").resize(target, Image.LANCZOS)
        self._column = 0
        self._row = 0

    def __len__(self) -> int:
        return self.columns * self.rows

    def __iter__(self) -> Iterator[Tile]:
        return self

    def __next__(self) -> Tile:
        if self._row >= self.rows:
            raise StopIteration

        column, row = self._column, self._row
        x = column * self.width
        y = row * self.height
        tile = Tile(column, row, self.image.crop((x, y, x + self.width, y + self.height)))

        self._column += 1
        if self._column >= self.columns:
            self._column = 0
            self._row += 1
        return tile


def quantize_tile(tile: Tile) -> QuantizedTile:
    """Reduce a tile to at most two colors with median cut.

    Uniform tiles are detected up front and get a single-entry palette, so
    glyph matching can skip them. In two-color tiles the color of the first
    pixel is always palette entry 0.
    """

    image = tile.image.convert("RGB")
    width, height = image.size
    pixel_count = width * height

    # At most one distinct color per pixel, so this never returns None.
    colors = image.getcolors(maxcolors=pixel_count)
    if len(colors) == 1:
        return _uniform(tile, width, height, colors[0][1])

    quantized = image.quantize(colors=2, method=Image.MEDIANCUT)
    indices = quantized.tobytes()
    raw_palette = quantized.getpalette()
    palette = [
        opaque(raw_palette[offset : offset + 3])
        for offset in range(0, min(len(raw_palette), 6), 3)
    ]

    used = sorted(set(indices))
    if len(used) < 2 or len(palette) < 2 or palette[0] == palette[1]:
        return _uniform(tile, width, height, palette[used[0]])

    # The first pixel always takes index 0, so a pattern and its phase-shifted
    # twin quantize to the same indices.
    if indices[0] == 1:
        palette = [palette[1], palette[0]]
        indices = indices.translate(_SWAP)

    return QuantizedTile(
        column=tile.column,
        row=tile.row,
        width=width,
        height=height,
        palette=(palette[0], palette[1]),
        indices=indices,
    )


def _uniform(tile: Tile, width: int, height: int, color) -> QuantizedTile:
    return QuantizedTile(
        column=tile.column,
        row=tile.row,
        width=width,
        height=height,
        palette=(opaque(color),),
        indices=bytes(width * height),
    )
