"""Points, rectangles and clipping helpers with Plan 9 edge semantics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

__all__ = [
    "Point",
    "Rectangle",
    "rect_clip",
    "rect_x_rect",
    "rect_in_rect",
    "combine_rect",
]


@dataclass(frozen=True)
class Point:
    """An integer point."""

    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class Rectangle:
    """A rectangle from ``min`` inclusive to ``max`` exclusive."""

    min: Point = field(default_factory=Point)
    max: Point = field(default_factory=Point)


def rect_x_rect(r: Rectangle, s: Rectangle) -> bool:
    """Report whether r and s share any point."""
    return (
        r.min.x < s.max.x
        and s.min.x < r.max.x
        and r.min.y < s.max.y
        and s.min.y < r.max.y
    )


def rect_clip(r: Rectangle, b: Rectangle) -> Optional[Rectangle]:
    """Return the part of r inside b, or None when they do not overlap."""
    if not rect_x_rect(r, b):
        return None
    return Rectangle(
        Point(max(r.min.x, b.min.x), max(r.min.y, b.min.y)),
        Point(min(r.max.x, b.max.x), min(r.max.y, b.max.y)),
    )


def rect_in_rect(r: Rectangle, s: Rectangle) -> bool:
    """Report whether r lies entirely within s."""
    return (
        s.min.x <= r.min.x
        and r.max.x <= s.max.x
        and s.min.y <= r.min.y
        and r.max.y <= s.max.y
    )


def combine_rect(r1: Rectangle, r2: Rectangle) -> Rectangle:
    """Return the smallest rectangle enclosing both r1 and r2."""
    return Rectangle(
        Point(min(r1.min.x, r2.min.x), min(r1.min.y, r2.min.y)),
        Point(max(r1.max.x, r2.max.x), max(r1.max.y, r2.max.y)),
    )