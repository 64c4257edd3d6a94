"""Glyph selection for two-color cells.

A glyph splits a cell into "on" and "off" pixels. With a two-entry palette a
cell can be drawn either with palette[1] on / palette[0] off (direct) or the
other way round (inverse). Matching picks the codepoint and role assignment
that agrees with the most pixels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .fonts import Font

# Tab, line feed, carriage return, SUB (EOF) and ESC break ANSI streams.
EXCLUDED_CODEPOINTS = frozenset({9, 10, 13, 26, 27})
BLOCK_CODEPOINTS: Tuple[int, ...] = (32, 176, 177, 178, 219, 220, 221, 222, 223)
FULL_BLOCK = 219

_DIGITS = bytes.maketrans(b"\x00\x01", b"01")

_ALL_CANDIDATES = tuple(cp for cp in range(256) if cp not in EXCLUDED_CODEPOINTS)
_BLOCK_CANDIDATES = tuple(cp for cp in BLOCK_CODEPOINTS if cp not in EXCLUDED_CODEPOINTS)


@dataclass(frozen=True)
class Match:
    codepoint: int
    fg: int
    bg: int


def candidate_codepoints(restrict: bool = False) -> Tuple[int, ...]:
    return _BLOCK_CANDIDATES if restrict else _ALL_CANDIDATES


def indices_to_mask(indices: Sequence[int]) -> int:
    """Pack 0/1 pixel indices into an integer, first pixel in the highest bit."""
    return int(bytes(indices).translate(_DIGITS), 2)


def agreement(font: Font, codepoint: int, indices: Sequence[int]) -> Tuple[int, int]:
    """Return ``(direct, inverse)`` pixel agreement counts for one glyph."""

    if len(indices) != font.size:
        raise ValueError(f"Expected {font.size} indices, got {len(indices)}")
    differing = (font.mask(codepoint) ^ indices_to_mask(indices)).bit_count()
    return font.size - differing, differing


def find_closest_glyph(
    font: Font,
    indices: Sequence[int],
    restrict: bool = False,
    corrected: bool = False,
) -> Match:
    """
    Scan the candidate codepoints in ascending order and keep the best match.
    A candidate replaces the current match only when its score is strictly
    greater, so the first codepoint to reach a score wins ties.

    When the inverse assignment wins, the stored best score is the direct
    count of that codepoint, not the inverse count; later candidates are
    compared against that lower value. ``corrected=True`` stores the inverse
    count instead, which keeps the overall maximum.
    """
    if len(indices) != font.size:
        raise ValueError(f"Expected {font.size} indices, got {len(indices)}")

    target = indices_to_mask(indices)
    size = font.size

    codepoint, fg, bg = 0, 0, 0
    best_count = 0
    for candidate in candidate_codepoints(restrict):
        inverse = (font.mask(candidate) ^ target).bit_count()
        direct = size - inverse
        if direct > best_count:
            codepoint, fg, bg = candidate, 1, 0
            best_count = direct
        if inverse > best_count:
            codepoint, fg, bg = candidate, 0, 1
            best_count = inverse if corrected else direct

    return Match(codepoint=codepoint, fg=fg, bg=bg)
