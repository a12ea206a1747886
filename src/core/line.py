"""
Orthogonal wires.

A Line is a list of vertices. Consecutive vertices are joined by two legs,
one horizontal and one vertical; `horizontal_first` (stored per segment)
says which leg comes first. A vertex is either a free Point or a SnapPoint
of a component, in which case the wire end follows the component.

Transforms of the line itself only move free vertices: bound vertices
belong to their component and move when it does.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from .geometry import Box, Point
from .schematic_model import CanvasElement, ElementKind
from .settings import DEFAULT_SETTINGS, EditorSettings
from .snap_point import SnapPoint

log = logging.getLogger(__name__)

Vertex = Union[Point, SnapPoint]


class LineDirection(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_horizontal(self) -> bool:
        return self in (LineDirection.LEFT, LineDirection.RIGHT)


def route_corner(start: Point, end: Point, horizontal_first: bool) -> Point:
    """Bend point of the two-leg orthogonal route from start to end."""
    if horizontal_first:
        return Point(end.x, start.y)
    return Point(start.x, end.y)


def _position(vertex: Vertex) -> Point:
    return vertex.point if isinstance(vertex, SnapPoint) else vertex


class Line(CanvasElement):
    kind = ElementKind.WIRE

    def __init__(self, start: Vertex):
        super().__init__()
        self._vertices: List[Vertex] = []
        self._horizontal_first: List[bool] = []
        self._mouse_point: Optional[Point] = None
        self._mouse_horizontal_first = False
        self.removed = False
        self._append_vertex(start)

    def __repr__(self) -> str:
        return f"Line({[p.to_tuple() for p in self.vertices]})"

    # --------------------------------------------------------------------- #
    # Vertices
    # --------------------------------------------------------------------- #

    def _append_vertex(self, vertex: Vertex) -> None:
        if isinstance(vertex, SnapPoint) and not vertex.is_removed:
            vertex.add_change_listener(self._on_snap_point_changed)
        else:
            vertex = Point.of(vertex)
        self._vertices.append(vertex)

    def _on_snap_point_changed(self, snap_point: SnapPoint, old_x: float, old_y: float, is_deleted: bool) -> None:
        if not is_deleted:
            return
        detached = Point(snap_point.x, snap_point.y)
        self._vertices = [detached if v is snap_point else v for v in self._vertices]
        log.debug("Wire vertex detached from removed anchor at (%s, %s)", snap_point.x, snap_point.y)

    @property
    def vertices(self) -> List[Point]:
        """Committed vertices (without the provisional mouse point)."""
        return [_position(v) for v in self._vertices]

    @property
    def bound_points(self) -> List[SnapPoint]:
        return [v for v in self._vertices if isinstance(v, SnapPoint)]

    def is_vertex_bound(self, index: int) -> bool:
        return isinstance(self._vertices[index], SnapPoint)

    @property
    def horizontal_first(self) -> List[bool]:
        return list(self._horizontal_first)

    @property
    def first_point(self) -> Point:
        return _position(self._vertices[0])

    @property
    def last_point(self) -> Point:
        return _position(self._vertices[-1])

    @property
    def segment_count(self) -> int:
        return len(self._horizontal_first)

    @property
    def mouse_point(self) -> Optional[Point]:
        return self._mouse_point

    def push_point(self, horizontal_first: bool, point: Vertex) -> None:
        """Append a vertex joined to the previous one by a two-leg route."""
        self._append_vertex(point)
        self._horizontal_first.append(horizontal_first)

    def update_mouse_point(self, horizontal_first: bool, point) -> None:
        """Set the provisional end that follows the pointer while drawing."""
        self._mouse_point = Point.of(point)
        self._mouse_horizontal_first = horizontal_first

    def remove_mouse_point(self) -> None:
        self._mouse_point = None

    # --------------------------------------------------------------------- #
    # Geometry
    # --------------------------------------------------------------------- #

    def path_points(self) -> List[Point]:
        """Polyline through all vertices and bend points, without repeated points."""
        vertices = self.vertices
        flags = list(self._horizontal_first)
        if self._mouse_point is not None:
            vertices.append(self._mouse_point)
            flags.append(self._mouse_horizontal_first)

        points = [vertices[0]]
        for start, end, horizontal_first in zip(vertices, vertices[1:], flags):
            for point in (route_corner(start, end, horizontal_first), end):
                if point != points[-1]:
                    points.append(point)
        return points

    def segments(self) -> List[Tuple[Point, Point]]:
        points = self.path_points()
        return list(zip(points, points[1:]))

    def bbox(self) -> Box:
        return Box.from_points(self.path_points())

    def get_anchor_point(self) -> Point:
        return self.bbox().center

    def is_inside_selection_rectangle(self, selection_box: Box) -> bool:
        segments = self.segments()
        if not segments:
            return selection_box.contains(self.first_point)
        # legs are axis aligned, so their bounding boxes are the legs themselves
        return any(Box.from_corners(a, b).intersects(selection_box) for a, b in segments)

    def _map_free_vertices(self, transform: Callable[[Point], Point]) -> None:
        self._vertices = [v if isinstance(v, SnapPoint) else transform(v) for v in self._vertices]
        if self._mouse_point is not None:
            self._mouse_point = transform(self._mouse_point)

    def move_rel(self, delta: Point) -> None:
        self._map_free_vertices(lambda p: p + delta)

    def rotate(self, angle_deg: float) -> None:
        """
        Rotate around the centre of the bounding box. Only multiples of 90
        degrees keep the wire orthogonal.

        Raises:
            ValueError: for any other angle.
        """
        quadrant = angle_deg / 90.0
        if not float(quadrant).is_integer():
            raise ValueError(f"Wires can only be rotated by multiples of 90 degrees, not {angle_deg}")
        center = self.get_anchor_point()
        self._map_free_vertices(lambda p: p.rotate(angle_deg, center))
        if int(quadrant) % 2:
            self._horizontal_first = [not flag for flag in self._horizontal_first]
            self._mouse_horizontal_first = not self._mouse_horizontal_first

    def flip(self, horizontal: bool) -> None:
        center = self.get_anchor_point()
        self._map_free_vertices(lambda p: p.flip(horizontal, center))

    # --------------------------------------------------------------------- #
    # Lifecycle / export
    # --------------------------------------------------------------------- #

    def remove(self) -> None:
        for snap_point in self.bound_points:
            snap_point.remove_change_listener(self._on_snap_point_changed)
        self.removed = True

    def to_tikz_string(
        self,
        resolve_name: Optional[Callable[[str], Optional[str]]] = None,
        settings: EditorSettings = DEFAULT_SETTINGS,
    ) -> str:
        """E.g. "\\draw (Q1.D) |- (1, -2) -| (3.5, 0);"."""
        parts = [self._vertex_tikz(self._vertices[0], resolve_name, settings)]
        for vertex, horizontal_first in zip(self._vertices[1:], self._horizontal_first):
            parts.append("-|" if horizontal_first else "|-")
            parts.append(self._vertex_tikz(vertex, resolve_name, settings))
        return f"\\draw {' '.join(parts)};"

    @staticmethod
    def _vertex_tikz(vertex: Vertex, resolve_name, settings: EditorSettings) -> str:
        if isinstance(vertex, SnapPoint):
            return vertex.to_tikz_string(resolve_name, settings)
        return vertex.to_tikz_string(settings)
