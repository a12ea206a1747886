"""
Snapping interfaces used by the interaction engines.

`SnapController` finds the point of interest nearest to the pointer and
`SnapCursor` shows it on the canvas. The engines only depend on these
protocols; `GridSnapController` is the default implementation used by the
document (grid points plus every component anchor).
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Protocol, Sequence

from .geometry import Point
from .settings import DEFAULT_SETTINGS, EditorSettings
from .snap_point import SnapPoint

log = logging.getLogger(__name__)


class SnapController(Protocol):
    def snap_point(self, candidate: Point, extra_targets: Sequence = ()):
        """
        Return the nearest point of interest within the snapping radius,
        or `candidate` unchanged. The result has `x` and `y` attributes;
        it may be a SnapPoint, in which case callers can bind to it.
        """
        ...


class SnapCursor(Protocol):
    def set_visible(self, visible: bool) -> None:
        ...

    def move_to(self, point: Point) -> None:
        ...


class NullSnapCursor:
    """Cursor used when no canvas is attached."""

    def __init__(self) -> None:
        self.visible = False
        self.position: Optional[Point] = None

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    def move_to(self, point: Point) -> None:
        self.position = Point.of(point)


def snap_to_grid(x: float, y: float, grid_size: float) -> tuple[float, float]:
    """Round coordinates to the nearest grid point."""
    if grid_size <= 0:
        return x, y
    return round(x / grid_size) * grid_size, round(y / grid_size) * grid_size


class GridSnapController:
    """
    Snaps to the nearest of: the grid point, any live SnapPoint returned by
    `targets`, and the extra targets passed per query.

    Anchors win over the grid point at equal distance.
    """

    def __init__(
        self,
        settings: EditorSettings = DEFAULT_SETTINGS,
        targets: Optional[Callable[[], Iterable[SnapPoint]]] = None,
    ):
        self.settings = settings
        self._targets = targets or (lambda: ())

    def snap_point(self, candidate: Point, extra_targets: Sequence = ()):
        candidate = Point.of(candidate)
        best = None
        best_dist = self.settings.snap_radius

        for target in list(self._targets()) + list(extra_targets):
            dist = candidate.distance(target)
            if dist <= best_dist:
                best = target
                best_dist = dist

        gx, gy = snap_to_grid(candidate.x, candidate.y, self.settings.grid_size)
        grid_point = Point(gx, gy)
        grid_dist = candidate.distance(grid_point)
        if grid_dist < best_dist or (best is None and grid_dist <= best_dist):
            return grid_point

        if best is None:
            return candidate
        if isinstance(best, SnapPoint):
            return best
        return Point.of(best)
