"""Image to CP437 ANSI art converter.

This package turns raster images into a grid of CP437 character cells, each a
glyph of the IBM VGA font drawn with a foreground and background color. It can
be invoked through the CLI (``python -m img2ans``) or imported to convert an
image into blocks, an ANSI stream with a SAUCE record, or a PNG preview.
"""

from .ansi import AnsiOptions, convert_blocks_to_ans, encode_blocks, encode_sauce
from .cga import CGA_PALETTE, cga_color, cga_nearest, srgb_to_oklab
from .converter import (
    Block,
    ConvertOptions,
    convert,
    convert_blocks_to_image,
    convert_image,
    convert_path,
)
from .errors import ConversionError
from .fonts import Font, get_font, ibm_vga, vga50
from .matcher import BLOCK_CODEPOINTS, EXCLUDED_CODEPOINTS, Match, find_closest_glyph
from .tiles import QuantizedTile, Tile, TileExtractor, calculate_rows, quantize_tile

__all__ = [
    "AnsiOptions",
    "BLOCK_CODEPOINTS",
    "Block",
    "CGA_PALETTE",
    "ConversionError",
    "ConvertOptions",
    "EXCLUDED_CODEPOINTS",
    "Font",
    "Match",
    "QuantizedTile",
    "Tile",
    "TileExtractor",
    "calculate_rows",
    "cga_color",
    "cga_nearest",
    "convert",
    "convert_blocks_to_ans",
    "convert_blocks_to_image",
    "convert_image",
    "convert_path",
    "encode_blocks",
    "encode_sauce",
    "find_closest_glyph",
    "get_font",
    "ibm_vga",
    "quantize_tile",
    "srgb_to_oklab",
    "vga50",
]
