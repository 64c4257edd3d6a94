"""CGA palette lookup in the Oklab color space."""

# Reference: IBM CGA 16-color palette, listed in SGR order so that an index can
# be emitted as ``30 + index`` (``1;30 + index - 8`` for the bright half).
# Index | Color          | RGB
# ------|----------------|---------------
#  0    | Black          | 0, 0, 0
#  1    | Red            | 170, 0, 0
#  2    | Green          | 0, 170, 0
#  3    | Brown          | 170, 85, 0
#  4    | Blue           | 0, 0, 170
#  5    | Magenta        | 170, 0, 170
#  6    | Cyan           | 0, 170, 170
#  7    | Light gray     | 170, 170, 170
#  8    | Dark gray      | 85, 85, 85
#  9    | Light red      | 255, 85, 85
# 10    | Light green    | 85, 255, 85
# 11    | Yellow         | 255, 255, 85
# 12    | Light blue     | 85, 85, 255
# 13    | Light magenta  | 255, 85, 255
# 14    | Light cyan     | 85, 255, 255
# 15    | White          | 255, 255, 255

from __future__ import annotations

from functools import lru_cache
from typing import List, Sequence, Tuple

Color = Tuple[int, int, int, int]
Oklab = Tuple[float, float, float]

BLACK: Color = (0, 0, 0, 255)

CGA_PALETTE: Tuple[Tuple[int, int, int], ...] = (
    (0, 0, 0),
    (170, 0, 0),
    (0, 170, 0),
    (170, 85, 0),
    (0, 0, 170),
    (170, 0, 170),
    (0, 170, 170),
    (170, 170, 170),
    (85, 85, 85),
    (255, 85, 85),
    (85, 255, 85),
    (255, 255, 85),
    (85, 85, 255),
    (255, 85, 255),
    (85, 255, 255),
    (255, 255, 255),
)


def opaque(color: Sequence[int]) -> Color:
    """Return ``color`` as an RGBA tuple with full alpha."""

    r, g, b = color[:3]
    return (int(r), int(g), int(b), 255)


def _srgb_to_linear(component: int) -> float:
    value = component / 255.0
    if value <= 0.04045:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def _cbrt(value: float) -> float:
    return value ** (1.0 / 3.0) if value >= 0 else -((-value) ** (1.0 / 3.0))


def srgb_to_oklab(color: Sequence[int]) -> Oklab:
    """Convert an 8-bit sRGB color to Oklab ``(L, a, b)``."""

    r, g, b = (_srgb_to_linear(c) for c in color[:3])

    l = _cbrt(0.4122214708 * r + 0.5363325363 * g + 0.0514459929 * b)
    m = _cbrt(0.2119034982 * r + 0.6806995451 * g + 0.1073969566 * b)
    s = _cbrt(0.0883024619 * r + 0.2817188376 * g + 0.6299787005 * b)

    return (
        0.2104542553 * l + 0.7936177850 * m - 0.0040720468 * s,
        1.9779984951 * l - 2.4285922050 * m + 0.4505937099 * s,
        0.0259040371 * l + 0.7827717662 * m - 0.8086757660 * s,
    )


_CGA_OKLAB: List[Oklab] = [srgb_to_oklab(rgb) for rgb in CGA_PALETTE]


def cga_color(index: int) -> Color:
    """Return the RGBA color of CGA palette entry ``index`` (0-15)."""

    if not 0 <= index < len(CGA_PALETTE):
        raise IndexError(f"CGA palette index out of range: {index}")
    return opaque(CGA_PALETTE[index])


@lru_cache(maxsize=4096)
def _nearest_rgb(r: int, g: int, b: int) -> int:
    L, a, b_ = srgb_to_oklab((r, g, b))
    best_idx = 0
    best_dist = float("inf")
    for i, (pl, pa, pb) in enumerate(_CGA_OKLAB):
        dist = (L - pl) ** 2 + (a - pa) ** 2 + (b_ - pb) ** 2
        if dist < best_dist:
            best_idx = i
            best_dist = dist
    return best_idx


def cga_nearest(color: Sequence[int]) -> int:
    """
    Return the CGA palette index perceptually closest to ``color``.
    Distances are squared Euclidean distances in Oklab with the three
    components weighted equally. Ties go to the lower index. Alpha is ignored.
    """
    r, g, b = color[:3]
    return _nearest_rgb(int(r), int(g), int(b))
