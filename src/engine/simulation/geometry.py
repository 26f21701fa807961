"""2D point math shared by motion integration and collision tests."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class Point:
    """A plain coordinate in logical canvas space (y grows downward)."""

    x: float
    y: float

    def copy(self) -> Point:
        return Point(self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between *a* and *b*."""
    return math.hypot(b.x - a.x, b.y - a.y)


def direction(a: Point, b: Point) -> Point:
    """Unit vector pointing from *a* to *b*.

    Raises ValueError when the points coincide; callers test arrival
    before stepping, so this only fires on a logic error.
    """
    d = distance(a, b)
    if d == 0:
        raise ValueError("direction undefined for coincident points")
    return Point((b.x - a.x) / d, (b.y - a.y) / d)


def is_finite_point(x: float, y: float) -> bool:
    """True when both coordinates are real, finite numbers."""
    try:
        return math.isfinite(x) and math.isfinite(y)
    except TypeError:
        return False
