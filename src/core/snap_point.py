"""
Points relative to a placed component.

A SnapPoint recreates a CircuiTikZ anchor on the canvas: it sits at a fixed
offset from its owner's position and turns with the owner. Wires bind to
SnapPoints so that their ends follow when the component moves.

The owner is referenced only by its registry id; the name used for TikZ
export is looked up through the document when the point is serialized.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .exceptions import UseAfterRemoveError
from .geometry import Point, sin_cos
from .settings import DEFAULT_SETTINGS, EditorSettings

log = logging.getLogger(__name__)

# listener(snap_point, old_x, old_y, is_deleted)
SnapPointChangeListener = Callable[["SnapPoint", float, float, bool], None]
NameResolver = Callable[[str], Optional[str]]


class SnapPoint:
    """
    position = rotate(mirror(rel_position), angle) + mid

    `mirror` negates the local y component while the owner is mirrored.
    """

    def __init__(
        self,
        owner_id: Optional[str],
        anchor_name: Optional[str],
        mid,
        rel_position,
        angle: float = 0.0,
        mirrored: bool = False,
    ):
        self._owner_id = owner_id
        self._anchor_name = anchor_name
        self._rel_position = Point.of(rel_position)
        self._mid = Point.of(mid)
        self._angle = angle
        self._mirrored = mirrored
        self._removed = False
        self._change_listeners: List[SnapPointChangeListener] = []
        self.x = 0.0
        self.y = 0.0
        self._update_position()

    def __repr__(self) -> str:
        return f"SnapPoint({self._owner_id!r}, {self._anchor_name!r}, x={self.x}, y={self.y})"

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    @property
    def anchor_name(self) -> Optional[str]:
        return self._anchor_name

    @property
    def mid(self) -> Point:
        return self._mid

    @property
    def angle(self) -> float:
        return self._angle

    @property
    def mirrored(self) -> bool:
        return self._mirrored

    @property
    def is_removed(self) -> bool:
        return self._removed

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    def _update_position(self) -> None:
        sin, cos = sin_cos(self._angle)
        rel_x = self._rel_position.x
        rel_y = -self._rel_position.y if self._mirrored else self._rel_position.y
        self.x = cos * rel_x + sin * rel_y + self._mid.x
        self.y = -sin * rel_x + cos * rel_y + self._mid.y

    def recalculate(self, new_mid=None, angle: Optional[float] = None, mirrored: Optional[bool] = None) -> None:
        """
        Recalculate the position after the owner moved or turned.

        Arguments left as None keep their previous value.

        Raises:
            UseAfterRemoveError: if the owner has already been removed.
        """
        if self._removed:
            raise UseAfterRemoveError(
                f"SnapPoint {self._anchor_name or ''} at ({self.x}, {self.y}) was already removed"
            )
        if new_mid is not None:
            self._mid = Point.of(new_mid)
        if angle is not None:
            self._angle = angle
        if mirrored is not None:
            self._mirrored = mirrored

        old_x, old_y = self.x, self.y
        self._update_position()

        for listener in list(self._change_listeners):
            listener(self, old_x, old_y, False)

    def remove_instance(self) -> None:
        """
        Called by the owner when it is removed. Listeners are told about the
        deletion and then dropped; the point keeps its last coordinates.
        """
        if self._removed:
            return
        for listener in list(self._change_listeners):
            listener(self, self.x, self.y, True)
        self._removed = True
        self._owner_id = None
        self._anchor_name = None
        self._change_listeners.clear()

    def add_change_listener(self, listener: SnapPointChangeListener) -> None:
        self._change_listeners.append(listener)

    def remove_change_listener(self, listener: SnapPointChangeListener) -> None:
        try:
            self._change_listeners.remove(listener)
        except ValueError:
            pass

    @property
    def listener_count(self) -> int:
        return len(self._change_listeners)

    def to_tikz_string(
        self,
        resolve_name: Optional[NameResolver] = None,
        settings: EditorSettings = DEFAULT_SETTINGS,
    ) -> str:
        """
        Format for TikZ: "(Q1.G)" if the owner has a node name and the point an
        anchor name, otherwise the coordinate in cm, e.g. "(0.1, -1.23)".
        """
        node_name = None
        if resolve_name is not None and self._owner_id is not None:
            node_name = resolve_name(self._owner_id)
        if node_name and self._anchor_name:
            return f"({node_name}.{self._anchor_name})"
        return self.point.to_tikz_string(settings)
