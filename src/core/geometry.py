"""
2-D geometry primitives for the canvas.

Coordinates are canvas coordinates: x grows to the right, y grows downward.
Angles are in degrees. A positive angle turns counter-clockwise on screen,
which matches TikZ (where y grows upward).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .settings import DEFAULT_SETTINGS, EditorSettings
from .units import format_number, px_to_cm

_QUADRANT_SIN = (0.0, 1.0, 0.0, -1.0)
_QUADRANT_COS = (1.0, 0.0, -1.0, 0.0)


def sin_cos(angle_deg: float) -> Tuple[float, float]:
    """
    Return (sin, cos) of an angle in degrees.

    Exact multiples of 90 degrees use a lookup table so that axis aligned
    geometry stays on integer coordinates.
    """
    quadrant = angle_deg / 90.0
    if float(quadrant).is_integer():
        q = int(quadrant) % 4
        return _QUADRANT_SIN[q], _QUADRANT_COS[q]
    rad = math.radians(angle_deg)
    return math.sin(rad), math.cos(rad)


def rotate_vector(x: float, y: float, angle_deg: float) -> Tuple[float, float]:
    sin, cos = sin_cos(angle_deg)
    return cos * x + sin * y, -sin * x + cos * y


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other) -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other) -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y)

    @classmethod
    def of(cls, value) -> "Point":
        """Accept a Point, anything with x/y attributes, or an (x, y) pair."""
        if isinstance(value, Point):
            return value
        if hasattr(value, "x") and hasattr(value, "y"):
            return cls(float(value.x), float(value.y))
        x, y = value
        return cls(float(x), float(y))

    def rotate(self, angle_deg: float, pivot: Optional["Point"] = None) -> "Point":
        """Rotate around `pivot` (the origin if omitted)."""
        pivot = pivot or Point()
        dx, dy = rotate_vector(self.x - pivot.x, self.y - pivot.y, angle_deg)
        return Point(pivot.x + dx, pivot.y + dy)

    def flip(self, horizontal: bool, pivot: Optional["Point"] = None) -> "Point":
        """
        Reflect the point. A horizontal flip mirrors across the vertical line
        through `pivot`, a vertical flip across the horizontal line.
        """
        pivot = pivot or Point()
        if horizontal:
            return Point(2 * pivot.x - self.x, self.y)
        return Point(self.x, 2 * pivot.y - self.y)

    def distance(self, other) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_close(self, other, tolerance: float = 1e-9) -> bool:
        return abs(self.x - other.x) <= tolerance and abs(self.y - other.y) <= tolerance

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_tikz_string(self, settings: EditorSettings = DEFAULT_SETTINGS) -> str:
        """Format as a TikZ coordinate in cm, e.g. "(0.1, -1.23)". TikZ y points up."""
        x = format_number(px_to_cm(self.x, settings.px_per_cm), settings.tikz_decimals)
        y = format_number(px_to_cm(-self.y, settings.px_per_cm), settings.tikz_decimals)
        return f"({x}, {y})"


@dataclass(frozen=True)
class Box:
    """Axis aligned rectangle. width and height are never negative."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_corners(cls, a, b) -> "Box":
        """Box spanning two corners in any order."""
        x, width = a.x, b.x - a.x
        y, height = a.y, b.y - a.y
        if width < 0:
            x += width
            width = -width
        if height < 0:
            y += height
            height = -height
        return cls(x, y, width, height)

    @classmethod
    def from_points(cls, points: Iterable) -> Optional["Box"]:
        """Bounding box of the points, or None if there are none."""
        points = list(points)
        if not points:
            return None
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def cx(self) -> float:
        return self.x + self.width / 2

    @property
    def cy(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> Point:
        return Point(self.cx, self.cy)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        return (
            Point(self.x, self.y),
            Point(self.x2, self.y),
            Point(self.x2, self.y2),
            Point(self.x, self.y2),
        )

    def merge(self, other: "Box") -> "Box":
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return Box(x, y, max(self.x2, other.x2) - x, max(self.y2, other.y2) - y)

    def intersects(self, other: "Box") -> bool:
        """Overlap test; touching edges count as intersecting."""
        return (
            self.x <= other.x2
            and other.x <= self.x2
            and self.y <= other.y2
            and other.y <= self.y2
        )

    def contains(self, point) -> bool:
        return self.x <= point.x <= self.x2 and self.y <= point.y <= self.y2
