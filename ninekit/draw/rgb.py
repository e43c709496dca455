"""Conversion between RGB triples and the standard 8-bit colour map."""

from __future__ import annotations

from functools import lru_cache

from ninekit.draw.pix import Color

__all__ = ["rgb2cmap", "cmap2rgb", "cmap2rgba"]


def cmap2rgb(c: int) -> tuple[int, int, int]:
    """Return the (r, g, b) of colour-map entry ``c``."""
    r = c >> 6
    v = (c >> 4) & 3
    j = (c - v + r) & 15
    g = j >> 2
    b = j & 3
    den = max(r, g, b)
    if den == 0:
        v *= 17
        return v, v, v
    num = 17 * (4 * den + v)
    return r * num // den, g * num // den, b * num // den


@lru_cache(maxsize=1)
def _palette() -> tuple[tuple[int, int, int], ...]:
    return tuple(cmap2rgb(i) for i in range(256))


def rgb2cmap(cr: int, cg: int, cb: int) -> int:
    """Return the colour-map index nearest to (cr, cg, cb) in RGB space."""
    return min(
        range(256),
        key=lambda i: (
            (_palette()[i][0] - cr) ** 2
            + (_palette()[i][1] - cg) ** 2
            + (_palette()[i][2] - cb) ** 2
        ),
    )


def cmap2rgba(c: int) -> Color:
    """Return colour-map entry ``c`` as an opaque Color."""
    r, g, b = cmap2rgb(c)
    return Color((r << 24 | g << 16 | b << 8 | 0xFF) & 0xFFFFFFFF)