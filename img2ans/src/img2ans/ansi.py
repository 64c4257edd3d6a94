"""ANSI byte stream and SAUCE trailer for converted blocks."""

# Reference: SAUCE 00 trailer as written after the ANSI data (129 bytes)
# Offset | Size | Field     | Notes
# -------|------|-----------|-----------------------------------------------
#   0    |  1   | EOF       | 0x1A, stops DOS TYPE before the record
#   1    |  5   | ID        | "SAUCE"
#   6    |  2   | Version   | "00"
#   8    | 35   | Title     | space padded
#  43    | 20   | Author    | space padded
#  63    | 20   | Group     | space padded
#  83    |  8   | Date      | CCYYMMDD
#  91    |  4   | FileSize  | u32 LE, ANSI data length without the trailer
#  95    |  1   | DataType  | 1 = Character
#  96    |  1   | FileType  | 1 = ANSi
#  97    |  2   | TInfo1    | u16 LE, columns
#  99    |  2   | TInfo2    | u16 LE, rows
# 101    |  2   | TInfo3    | unused
# 103    |  2   | TInfo4    | unused
# 105    |  1   | Comments  | comment lines (none)
# 106    |  1   | TFlags    | bit 0 iCE colors, bits 1-2 letter spacing
# 107    | 22   | TInfoS    | font name, NUL padded

from __future__ import annotations

import datetime
import struct
import warnings
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .converter import Block, grid_rows
from .errors import ConversionError
from .fonts import MAX_FONT_NAME_BYTES, Font

SAUCE_SIZE = 129
SAUCE_DATA_TYPE_CHARACTER = 1
SAUCE_FILE_TYPE_ANSI = 1
FLAG_ICE_COLORS = 0x01
FLAG_LETTER_SPACING_8 = 0x02
MAX_U16 = 0xFFFF
MAX_U32 = 0xFFFFFFFF


@dataclass
class AnsiOptions:
    """Options for the ANSI stream and its SAUCE record."""

    truecolor: bool = True
    modern_sgr: bool = False  # ESC[38;2;R;G;Bm instead of ESC[1;R;G;Bt
    title: str = ""
    author: str = ""
    group: str = ""
    date: datetime.date | None = None


def cga_fg_sgr(index: int) -> str:
    if not 0 <= index <= 15:
        raise ConversionError(f"CGA index out of range: {index}")
    return f"{30 + index}" if index < 8 else f"1;{30 + index - 8}"


def cga_bg_sgr(index: int) -> str:
    """SGR parameters for a CGA background color.

    Indices 8-15 are written as blink plus the base color (``5;40+(i-8)``).
    ANSI art viewers show blink as a bright background when iCE colors are
    enabled; ``1;`` would only brighten the foreground.
    """
    if not 0 <= index <= 15:
        raise ConversionError(f"CGA index out of range: {index}")
    return f"{40 + index}" if index < 8 else f"5;{40 + index - 8}"


def _truecolor_sequences(block: Block, modern_sgr: bool) -> bytes:
    parts: List[str] = []
    if block.bg is not None:
        r, g, b = block.bg[:3]
        parts.append(f"\x1b[48;2;{r};{g};{b}m" if modern_sgr else f"\x1b[0;{r};{g};{b}t")
    r, g, b = block.fg[:3]
    parts.append(f"\x1b[38;2;{r};{g};{b}m" if modern_sgr else f"\x1b[1;{r};{g};{b}t")
    return "".join(parts).encode("ascii")


def _cga_sequence(block: Block) -> bytes:
    codes = ["0"]
    if block.cga_bg is not None:
        codes.append(cga_bg_sgr(block.cga_bg))
    codes.append(cga_fg_sgr(block.cga_fg))
    return f"\x1b[{';'.join(codes)}m".encode("ascii")


def encode_blocks(blocks: Iterable[Block], options: AnsiOptions | None = None) -> bytes:
    """Serialize blocks as color escape sequences followed by the codepoint byte."""

    options = options or AnsiOptions()
    out = bytearray()
    for block in blocks:
        if options.truecolor:
            out += _truecolor_sequences(block, options.modern_sgr)
        else:
            out += _cga_sequence(block)
        out.append(block.codepoint)
    return bytes(out)


def uses_ice_colors(blocks: Iterable[Block]) -> bool:
    return any(block.cga_bg is not None and block.cga_bg >= 8 for block in blocks)


def _text_field(value: str, size: int, label: str) -> bytes:
    data = value.encode("cp437", errors="replace")
    if len(data) > size:
        warnings.warn(
            f"SAUCE {label} truncated to {size} bytes",
            UserWarning,
            stacklevel=3,
        )
        data = data[:size]
    return data.ljust(size, b" ")


def encode_sauce(
    file_size: int,
    columns: int,
    rows: int,
    font_name: str,
    title: str = "",
    author: str = "",
    group: str = "",
    date: datetime.date | None = None,
    ice_colors: bool = False,
) -> bytes:
    """Build the 129-byte EOF marker plus SAUCE record."""

    if not 0 <= file_size <= MAX_U32:
        raise ConversionError(f"ANSI data too large for SAUCE: {file_size} bytes")
    if not 0 <= columns <= MAX_U16 or not 0 <= rows <= MAX_U16:
        raise ConversionError(f"Grid {columns}x{rows} does not fit SAUCE 16-bit fields")

    font_bytes = font_name.encode("ascii")
    if len(font_bytes) > MAX_FONT_NAME_BYTES:
        raise ConversionError(f"Font name longer than {MAX_FONT_NAME_BYTES} bytes: {font_name}")

    date = date or datetime.date.today()
    flags = FLAG_LETTER_SPACING_8 | (FLAG_ICE_COLORS if ice_colors else 0)

    record = b"".join(
        [
            b"\x1a",
            b"SAUCE",
            b"00",
            _text_field(title, 35, "title"),
            _text_field(author, 20, "author"),
            _text_field(group, 20, "group"),
            date.strftime("%Y%m%d").encode("ascii"),
            struct.pack(
                "<IBBHHHHBB",
                file_size,
                SAUCE_DATA_TYPE_CHARACTER,
                SAUCE_FILE_TYPE_ANSI,
                columns,
                rows,
                0,
                0,
                0,
                flags,
            ),
            font_bytes.ljust(MAX_FONT_NAME_BYTES, b"\x00"),
        ]
    )
    return record


def convert_blocks_to_ans(
    blocks: Sequence[Block],
    font: Font,
    columns: int,
    options: AnsiOptions | None = None,
) -> bytes:
    """Return the ANSI stream for ``blocks`` with its SAUCE trailer appended."""

    options = options or AnsiOptions()
    rows = grid_rows(blocks, columns)
    data = encode_blocks(blocks, options)
    sauce = encode_sauce(
        len(data),
        columns,
        rows,
        font.name,
        title=options.title,
        author=options.author,
        group=options.group,
        date=options.date,
        ice_colors=not options.truecolor and uses_ice_colors(blocks),
    )
    return data + sauce
