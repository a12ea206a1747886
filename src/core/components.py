"""
Component instances placed on the canvas.

- NodeComponentInstance: a node-style symbol placed at one point; it can be
  rotated by any angle and mirrored.
- PathComponentInstance: a path-style symbol drawn between a start and an
  end point; its angle follows the direction from start to end.

Each instance owns one SnapPoint per anchor. The instance recalculates them
after every transform and releases them when it is removed, which tells
bound wires to detach.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Tuple

from .geometry import Box, Point, rotate_vector
from .schematic_model import CanvasElement, ElementKind
from .settings import DEFAULT_SETTINGS, EditorSettings
from .snap_point import SnapPoint
from .symbol import ComponentSymbol, NodeComponentSymbol, PathComponentSymbol
from .units import format_number

log = logging.getLogger(__name__)


def _normalize_angle(angle_deg: float) -> float:
    angle = angle_deg % 360.0
    return 0.0 if angle == 360.0 else angle


class ComponentInstance(CanvasElement):
    kind = ElementKind.COMPONENT

    def __init__(self, symbol: ComponentSymbol, instance_id: str, node_name: Optional[str] = None):
        super().__init__()
        self.symbol = symbol
        self.id = instance_id
        self.node_name = node_name
        self.angle: float = 0.0
        self.mirrored: bool = False
        self.snapping_points: List[SnapPoint] = []
        self.removed = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol.tikz_name!r}, id={self.id!r}, name={self.node_name!r})"

    def snap_point(self, anchor_name: str) -> Optional[SnapPoint]:
        for point in self.snapping_points:
            if point.anchor_name == anchor_name:
                return point
        return None

    def _to_world(self, local: Point, origin: Point) -> Point:
        """Map a point relative to the symbol mid into canvas coordinates."""
        y = -local.y if self.mirrored else local.y
        dx, dy = rotate_vector(local.x, y, self.angle)
        return Point(origin.x + dx, origin.y + dy)

    def _symbol_outline(self, origin: Point) -> List[Point]:
        """View box corners of the symbol graphic, transformed onto the canvas."""
        view_box = self.symbol.view_box
        if view_box is None:
            return []
        return [self._to_world(corner - self.symbol.mid, origin) for corner in view_box.corners()]

    def outline(self) -> List[Point]:
        """Corners of the symbol graphic on the canvas (empty without a view box)."""
        return self._symbol_outline(self.get_anchor_point())

    @property
    def text_position(self) -> Optional[Point]:
        """Where the node name label goes, or None when the symbol has no text anchor."""
        anchor = self.symbol.text_anchor
        if anchor is None:
            return None
        return self._to_world(self.symbol.relative_point(anchor), self.get_anchor_point())

    def lead(self) -> Optional[Tuple[Point, Point]]:
        """The wire segment the symbol sits on. Node components have none."""
        return None

    def remove(self) -> None:
        if self.removed:
            return
        for point in self.snapping_points:
            point.remove_instance()
        self.removed = True
        log.debug("Removed %r", self)


class NodeComponentInstance(ComponentInstance):
    """
    Node-style component. `position` is where the symbol's mid (TikZ origin)
    sits on the canvas.
    """

    def __init__(
        self,
        symbol: NodeComponentSymbol,
        instance_id: str,
        position=Point(),
        node_name: Optional[str] = None,
    ):
        super().__init__(symbol, instance_id, node_name)
        self.position = Point.of(position)
        self.snapping_points = [
            SnapPoint(self.id, anchor.name, self.position, symbol.relative_point(anchor))
            for anchor in symbol.snapping_anchors
        ]

    def get_anchor_point(self) -> Point:
        return self.position

    def default_anchor_offset(self) -> Point:
        """Offset from `position` to the default anchor, in canvas orientation."""
        anchor = self.symbol.default_anchor
        if anchor is None:
            return Point()
        return self._to_world(self.symbol.relative_point(anchor), Point())

    def place_default_anchor_at(self, point) -> None:
        """Move the component so that its default anchor lands on `point`."""
        self.move_to(Point.of(point) - self.default_anchor_offset())

    def bbox(self) -> Box:
        outline = self._symbol_outline(self.position)
        if not outline:
            outline = [self.position] + [p.point for p in self.snapping_points]
        return Box.from_points(outline)

    def recalculate_snapping_points(self) -> None:
        for point in self.snapping_points:
            point.recalculate(self.position, self.angle, self.mirrored)

    def move_rel(self, delta: Point) -> None:
        self.position = self.position + delta
        self.recalculate_snapping_points()

    def rotate(self, angle_deg: float) -> None:
        self.angle = _normalize_angle(self.angle + angle_deg)
        self.recalculate_snapping_points()

    def flip(self, horizontal: bool) -> None:
        # mirror(world) * rotate(a) == rotate(180 - a) * mirror(local), resp. rotate(-a)
        if horizontal:
            self.angle = _normalize_angle(180.0 - self.angle)
        else:
            self.angle = _normalize_angle(-self.angle)
        self.mirrored = not self.mirrored
        self.recalculate_snapping_points()

    def to_tikz_string(
        self,
        resolve_name: Optional[Callable[[str], Optional[str]]] = None,
        settings: EditorSettings = DEFAULT_SETTINGS,
    ) -> str:
        options = [self.symbol.tikz_name]
        if self.angle:
            options.append(f"rotate={format_number(self.angle, settings.tikz_decimals)}")
        if self.mirrored:
            options.append("yscale=-1")
        name = f" ({self.node_name})" if self.node_name else ""
        return f"\\node[{', '.join(options)}]{name} at {self.position.to_tikz_string(settings)} {{}};"


class PathComponentInstance(ComponentInstance):
    """
    Path-style component between `start` and `end`. The symbol is centred on
    the midpoint and turned to the direction of the path.
    """

    def __init__(
        self,
        symbol: PathComponentSymbol,
        instance_id: str,
        start=Point(),
        end=Point(),
        node_name: Optional[str] = None,
    ):
        super().__init__(symbol, instance_id, node_name)
        self.start = Point.of(start)
        self.end = Point.of(end)
        self._update_angle()
        self.snapping_points = [
            SnapPoint(self.id, None, self.start, Point()),
            SnapPoint(self.id, None, self.end, Point()),
            *(
                SnapPoint(self.id, pin.name, self.mid, symbol.relative_point(pin), self.angle)
                for pin in symbol.pins
            ),
        ]

    @property
    def mid(self) -> Point:
        return (self.start + self.end) * 0.5

    def _update_angle(self) -> None:
        if self.start == self.end:
            return
        # TikZ orientation: y grows upward
        self.angle = math.degrees(math.atan2(self.start.y - self.end.y, self.end.x - self.start.x))

    def get_anchor_point(self) -> Point:
        return self.mid

    def lead(self) -> Optional[Tuple[Point, Point]]:
        return self.start, self.end

    def set_points(self, start, end) -> None:
        self.start = Point.of(start)
        self.end = Point.of(end)
        self.recalculate_snapping_points()

    def recalculate_snapping_points(self) -> None:
        self._update_angle()
        start_point, end_point, *pins = self.snapping_points
        start_point.recalculate(self.start)
        end_point.recalculate(self.end)
        mid = self.mid
        for point in pins:
            point.recalculate(mid, self.angle, self.mirrored)

    def bbox(self) -> Box:
        outline = [self.start, self.end, *self._symbol_outline(self.mid)]
        outline.extend(p.point for p in self.snapping_points[2:])
        return Box.from_points(outline)

    def move_rel(self, delta: Point) -> None:
        self.start = self.start + delta
        self.end = self.end + delta
        self.recalculate_snapping_points()

    def rotate(self, angle_deg: float) -> None:
        mid = self.mid
        self.start = self.start.rotate(angle_deg, mid)
        self.end = self.end.rotate(angle_deg, mid)
        self.recalculate_snapping_points()

    def flip(self, horizontal: bool) -> None:
        mid = self.mid
        self.start = self.start.flip(horizontal, mid)
        self.end = self.end.flip(horizontal, mid)
        self.mirrored = not self.mirrored
        self.recalculate_snapping_points()

    def to_tikz_string(
        self,
        resolve_name: Optional[Callable[[str], Optional[str]]] = None,
        settings: EditorSettings = DEFAULT_SETTINGS,
    ) -> str:
        options = [self.symbol.tikz_name]
        if self.node_name:
            options.append(f"n={self.node_name}")
        if self.mirrored:
            options.append("invert")
        start = self.snapping_points[0].to_tikz_string(resolve_name, settings)
        end = self.snapping_points[1].to_tikz_string(resolve_name, settings)
        return f"\\draw {start} to[{', '.join(options)}] {end};"
