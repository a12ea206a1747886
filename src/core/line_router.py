"""
Click-driven drawing of orthogonal wires.

The first click fixes the start of a wire; every further click adds a
vertex. While the pointer moves, the provisional last segment follows it and
the router decides whether that segment starts horizontally or vertically:

- on the first move the larger of |dx| and |dy| wins, and that choice is
  held from then on;
- the held choice changes when the pointer crosses the horizontal line
  through the last vertex (horizontal first) or the vertical line
  (vertical first), so the wire bends the way the user swings past the
  previous point;
- a new segment never starts by doubling back along the previous leg.

`confirm()` hands the finished wire to the owner, `cancel()` drops it.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from .geometry import Point
from .line import Line, LineDirection
from .pointer import CLICK, MOUSE_MOVE, PointerEvent, PointerEventHub
from .snapping import NullSnapCursor, SnapController, SnapCursor

log = logging.getLogger(__name__)

ORIGIN = Point(0, 0)


class RouterState(Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class LineRouter:
    def __init__(
        self,
        hub: PointerEventHub,
        snapper: SnapController,
        on_line_finished: Callable[[Line], None],
        cursor: Optional[SnapCursor] = None,
        on_change: Optional[Callable[[], None]] = None,
        finish_on_second_click: bool = False,
    ):
        self._hub = hub
        self._snapper = snapper
        self._on_line_finished = on_line_finished
        self._cursor = cursor or NullSnapCursor()
        self._on_change = on_change or (lambda: None)
        self.finish_on_second_click = finish_on_second_click
        self.active = False

        self._line: Optional[Line] = None
        self._last_point: Optional[Point] = None
        self._horizontal_first = False
        self._hold_direction_set = False
        self._last_line_direction: Optional[LineDirection] = None
        self._was_above_x_axis = False
        self._was_right_of_y_axis = False

    # --------------------------------------------------------------------- #
    # State
    # --------------------------------------------------------------------- #

    @property
    def state(self) -> RouterState:
        return RouterState.IDLE if self._line is None else RouterState.DRAWING

    @property
    def current_line(self) -> Optional[Line]:
        return self._line

    @property
    def horizontal_first(self) -> bool:
        return self._horizontal_first

    @property
    def last_line_direction(self) -> Optional[LineDirection]:
        return self._last_line_direction

    def _reset_vars(self) -> None:
        self._line = None
        self._last_point = None
        self._hold_direction_set = False
        self._last_line_direction = None

    # --------------------------------------------------------------------- #
    # Activation
    # --------------------------------------------------------------------- #

    def activate(self) -> None:
        """Start listening to the canvas."""
        self._reset_vars()
        self._hub.on(CLICK, self.on_click)
        self._hub.on(MOUSE_MOVE, self.on_move)
        self._cursor.set_visible(True)
        self.active = True
        log.debug("Line router activated")

    def deactivate(self) -> None:
        """Drop any wire in progress and stop listening to the canvas."""
        self.cancel()
        self._hub.off(MOUSE_MOVE, self.on_move)
        self._hub.off(CLICK, self.on_click)
        self._cursor.set_visible(False)
        self.active = False
        log.debug("Line router deactivated")

    # --------------------------------------------------------------------- #
    # Pointer handlers
    # --------------------------------------------------------------------- #

    def _snap(self, event: PointerEvent):
        if event.shift:
            return event.point
        return self._snapper.snap_point(event.point, [ORIGIN])

    def on_click(self, event: PointerEvent) -> None:
        snapped = self._snap(event)
        point = Point.of(snapped)

        if self._line is None:
            self._cursor.set_visible(False)
            self._line = Line(snapped)
            self._last_point = point
            log.debug("Wire started at %s", point)
            self._on_change()
            return

        if point == self._last_point:
            return

        self._line.push_point(self._horizontal_first, snapped)
        second_last = self._last_point
        self._last_point = point

        if (self._horizontal_first or point.x == second_last.x) and point.y != second_last.y:
            self._last_line_direction = LineDirection.UP if point.y < second_last.y else LineDirection.DOWN
        else:
            self._last_line_direction = LineDirection.LEFT if point.x < second_last.x else LineDirection.RIGHT

        if self.finish_on_second_click:
            self.confirm()
        else:
            self._on_change()

    def on_move(self, event: PointerEvent) -> None:
        snapped = self._snap(event)
        point = Point.of(snapped)

        if self._line is None:
            self._cursor.move_to(point)
            return

        is_above_x_axis = point.y < self._last_point.y
        is_right_of_y_axis = point.x > self._last_point.x

        if self._hold_direction_set:
            if self._was_above_x_axis != is_above_x_axis:
                self._horizontal_first = True
            elif self._was_right_of_y_axis != is_right_of_y_axis:
                self._horizontal_first = False
        else:
            dx = point.x - self._last_point.x
            dy = point.y - self._last_point.y
            self._horizontal_first = abs(dx) > abs(dy)
            self._hold_direction_set = True

        self._was_above_x_axis = is_above_x_axis
        self._was_right_of_y_axis = is_right_of_y_axis

        last = self._last_line_direction
        if (last is LineDirection.LEFT and is_right_of_y_axis) or (
            last is LineDirection.RIGHT and not is_right_of_y_axis
        ):
            self._horizontal_first = False
        elif (last is LineDirection.DOWN and is_above_x_axis) or (
            last is LineDirection.UP and not is_above_x_axis
        ):
            self._horizontal_first = True

        self._line.update_mouse_point(self._horizontal_first, point)
        self._on_change()

    # --------------------------------------------------------------------- #
    # Done / cancel
    # --------------------------------------------------------------------- #

    def confirm(self) -> Optional[Line]:
        """
        Finish the wire at its last vertex and hand it to the owner.

        Returns the finished line, or None if there was nothing to finish.
        A wire without a second vertex is discarded.
        """
        line = self._line
        if line is None:
            return None
        if line.segment_count == 0:
            log.debug("Discarding wire without segments")
            self.cancel()
            return None

        line.remove_mouse_point()
        self._on_line_finished(line)
        log.debug("Wire finished with %d segment(s)", line.segment_count)

        self._reset_vars()
        self._cursor.set_visible(True)
        self._on_change()
        return line

    def cancel(self) -> None:
        """Discard the wire in progress."""
        if self._line is not None:
            self._line.remove()
            log.debug("Wire cancelled")
        self._reset_vars()
        self._cursor.set_visible(True)
        self._on_change()
