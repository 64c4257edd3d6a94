"""Bundled CP437 bitmap fonts.

Each font file holds 256 consecutive glyphs, one byte per glyph row with the
most significant bit as the leftmost pixel. ``CP437.F16`` is the 8x16 VGA text
font used by 80x25 mode and ``CP437.F08`` the 8x8 font used by 80x50 mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from PIL import Image

from .cga import BLACK, opaque

GLYPH_COUNT = 256
GLYPH_WIDTH = 8
SUPPORTED_HEIGHTS = (8, 16)
# SAUCE TInfoS is a 22-byte zero padded string.
MAX_FONT_NAME_BYTES = 22

FONT_DIR = Path(__file__).resolve().parent / "fonts"


@dataclass(frozen=True)
class Font:
    """A 256-glyph, 8-pixel-wide bitmap font."""

    name: str
    width: int
    height: int
    bits: bytes = field(repr=False)
    _masks: List[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.width != GLYPH_WIDTH:
            raise ValueError(f"Font width must be {GLYPH_WIDTH}, got {self.width}")
        if self.height not in SUPPORTED_HEIGHTS:
            raise ValueError(f"Font height must be 8 or 16, got {self.height}")
        if len(self.bits) != GLYPH_COUNT * self.width * self.height:
            raise ValueError("Font bit array does not cover 256 glyphs")
        if len(self.name.encode("ascii")) > MAX_FONT_NAME_BYTES:
            raise ValueError(f"Font name longer than {MAX_FONT_NAME_BYTES} bytes: {self.name}")

        # One integer per glyph; bit (size - 1 - i) is pixel i in row-major order.
        masks = []
        for codepoint in range(GLYPH_COUNT):
            value = 0
            for bit in self.bits_for(codepoint):
                value = (value << 1) | bit
            masks.append(value)
        object.__setattr__(self, "_masks", masks)

    @classmethod
    def from_bytes(cls, data: bytes, name: str) -> "Font":
        if len(data) % GLYPH_COUNT != 0:
            raise ValueError(f"Font data length {len(data)} is not a multiple of {GLYPH_COUNT}")
        height = len(data) // GLYPH_COUNT
        bits = bytes(
            (byte >> shift) & 1 for byte in data for shift in range(GLYPH_WIDTH - 1, -1, -1)
        )
        return cls(name=name, width=GLYPH_WIDTH, height=height, bits=bits)

    @property
    def size(self) -> int:
        """Pixels per glyph."""
        return self.width * self.height

    def bits_for(self, codepoint: int) -> bytes:
        if not 0 <= codepoint < GLYPH_COUNT:
            raise IndexError(f"Codepoint out of range: {codepoint}")
        start = codepoint * self.size
        return self.bits[start : start + self.size]

    def mask(self, codepoint: int) -> int:
        return self._masks[codepoint]

    def render(
        self, codepoint: int, fg: Sequence[int], bg: Optional[Sequence[int]] = None
    ) -> Image.Image:
        """Render a glyph as an RGBA tile: ``fg`` on set bits, ``bg`` elsewhere.

        A missing background renders as opaque black.
        """

        background = opaque(bg) if bg is not None else BLACK
        tile = Image.new("RGBA", (self.width, self.height), background)
        shape = Image.frombytes(
            "L", (self.width, self.height), bytes(255 if bit else 0 for bit in self.bits_for(codepoint))
        )
        tile.paste(opaque(fg), (0, 0, self.width, self.height), shape)
        return tile

    def blit(self, target: Image.Image, tile: Image.Image, x: int, y: int) -> None:
        """Write ``tile`` into ``target`` with its top-left corner at ``(x, y)``."""

        width, height = tile.size
        if x < 0 or y < 0 or x + width > target.width or y + height > target.height:
            raise ValueError(
                f"Tile {width}x{height} at ({x}, {y}) does not fit a {target.width}x{target.height} image"
            )
        target.paste(tile, (x, y))

    def __str__(self) -> str:
        return self.name


def load_font(path: str | Path, name: str) -> Font:
    return Font.from_bytes(Path(path).read_bytes(), name)


@lru_cache(maxsize=None)
def ibm_vga() -> Font:
    """The 8x16 IBM VGA font."""
    return load_font(FONT_DIR / "CP437.F16", "IBM VGA")


@lru_cache(maxsize=None)
def vga50() -> Font:
    """The 8x8 IBM VGA font used by 50-line modes."""
    return load_font(FONT_DIR / "CP437.F08", "IBM VGA50")


FONTS: Dict[str, Callable[[], Font]] = {
    "vga": ibm_vga,
    "vga50": vga50,
}


def get_font(key: str) -> Font:
    try:
        factory = FONTS[key.lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown font: {key} (expected one of {', '.join(FONTS)})") from exc
    return factory()
