from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

from .geometry import Box, Point
from .settings import DEFAULT_SETTINGS, EditorSettings


class ElementKind(Enum):
    COMPONENT = "component"
    WIRE = "wire"


class CanvasElement(ABC):
    """
    Anything that can be placed on the canvas and selected.

    Components and wires share this interface so that the selection engine
    can transform them without knowing which is which; `kind` tells the
    engine which selection list an element belongs to.
    """

    kind: ElementKind

    def __init__(self) -> None:
        self.highlighted: bool = False

    # --------------------------------------------------------------------- #
    # Geometry
    # --------------------------------------------------------------------- #

    @abstractmethod
    def bbox(self) -> Box:
        raise NotImplementedError

    @abstractmethod
    def get_anchor_point(self) -> Point:
        """The point the element turns and flips around."""
        raise NotImplementedError

    @abstractmethod
    def move_rel(self, delta: Point) -> None:
        raise NotImplementedError

    def move_to(self, position: Point) -> None:
        """Move so that the anchor point lands on `position`."""
        self.move_rel(Point.of(position) - self.get_anchor_point())

    @abstractmethod
    def rotate(self, angle_deg: float) -> None:
        """Rotate around the anchor point."""
        raise NotImplementedError

    @abstractmethod
    def flip(self, horizontal: bool) -> None:
        """Mirror at the anchor point; horizontal mirrors across the vertical axis."""
        raise NotImplementedError

    def recalculate_snapping_points(self) -> None:
        """Bring dependent points up to date after a transform."""
        pass

    def is_inside_selection_rectangle(self, selection_box: Box) -> bool:
        return self.bbox().intersects(selection_box)

    # --------------------------------------------------------------------- #
    # Selection feedback
    # --------------------------------------------------------------------- #

    def show_bounding_box(self) -> None:
        self.highlighted = True

    def hide_bounding_box(self) -> None:
        self.highlighted = False

    # --------------------------------------------------------------------- #
    # Lifecycle / export
    # --------------------------------------------------------------------- #

    @abstractmethod
    def remove(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def to_tikz_string(
        self,
        resolve_name: Optional[Callable[[str], Optional[str]]] = None,
        settings: EditorSettings = DEFAULT_SETTINGS,
    ) -> str:
        raise NotImplementedError
