"""
Selection of components and wires.

Dragging on the canvas draws a marquee. While dragging, the elements that
would end up selected are highlighted; on release the result is committed.
How the marquee combines with the existing selection depends on the
modifier keys held at press time:

    shift + ctrl -> RESET   (only what the marquee touches)
    shift        -> ADD     (existing selection plus what it touches)
    ctrl         -> SUB     (existing selection minus what it touches)
    none         -> RESET

The engine also performs the group transforms (move, rotate, flip, delete)
on whatever is selected.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence

from .geometry import Box, Point
from .pointer import MOUSE_DOWN, MOUSE_MOVE, MOUSE_UP, MouseButton, PointerEvent
from .schematic_model import CanvasElement, ElementKind

if TYPE_CHECKING:
    from .components import ComponentInstance
    from .document import SchematicDocument
    from .line import Line

log = logging.getLogger(__name__)

SelectionListener = Callable[[], None]


class SelectionMode(Enum):
    RESET = 1
    ADD = 2
    SUB = 3


def selection_mode_for(shift: bool, ctrl: bool) -> SelectionMode:
    if shift:
        return SelectionMode.RESET if ctrl else SelectionMode.ADD
    return SelectionMode.SUB if ctrl else SelectionMode.RESET


def _combine(mode: SelectionMode, intersects: bool, selected: bool) -> bool:
    """Whether an element is selected after applying the marquee in `mode`."""
    if mode is SelectionMode.RESET:
        return intersects
    if mode is SelectionMode.ADD:
        return intersects or selected
    return not intersects and selected


class SelectionEngine:
    """
    Holds the current selection of one document. The component and wire
    lists are the document's own lists, not copies.
    """

    def __init__(self, document: "SchematicDocument"):
        self._document = document
        self._instances: List["ComponentInstance"] = document.instances
        self._lines: List["Line"] = document.lines
        self._hub = document.hub

        self.currently_selected_components: List["ComponentInstance"] = []
        self.currently_selected_lines: List["Line"] = []

        self._selection_mode = SelectionMode.RESET
        self._selection_start: Optional[Point] = None
        self._selection_rectangle = Box()
        self._currently_dragging = False
        self._selection_enabled = True
        self._listeners: List[SelectionListener] = []
        self.attached = False

    # --------------------------------------------------------------------- #
    # State
    # --------------------------------------------------------------------- #

    @property
    def selection_mode(self) -> SelectionMode:
        return self._selection_mode

    @property
    def selection_rectangle(self) -> Box:
        return self._selection_rectangle

    @property
    def dragging(self) -> bool:
        return self._currently_dragging

    @property
    def selection_enabled(self) -> bool:
        return self._selection_enabled

    @property
    def selected_elements(self) -> List[CanvasElement]:
        return [*self.currently_selected_components, *self.currently_selected_lines]

    def has_selection(self) -> bool:
        return bool(self.currently_selected_components or self.currently_selected_lines)

    def is_component_selected(self, component: "ComponentInstance") -> bool:
        return component in self.currently_selected_components

    def is_line_selected(self, line: "Line") -> bool:
        return line in self.currently_selected_lines

    # --------------------------------------------------------------------- #
    # Listeners
    # --------------------------------------------------------------------- #

    def add_selection_listener(self, listener: SelectionListener) -> None:
        self._listeners.append(listener)

    def remove_selection_listener(self, listener: SelectionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # --------------------------------------------------------------------- #
    # Canvas listening
    # --------------------------------------------------------------------- #

    def attach(self) -> None:
        self._hub.on(MOUSE_DOWN, self.on_mouse_down)
        self._hub.on(MOUSE_MOVE, self.on_mouse_move)
        self._hub.on(MOUSE_UP, self.on_mouse_up)
        self.attached = True

    def detach(self) -> None:
        self._cancel_drag()
        self._hub.off(MOUSE_DOWN, self.on_mouse_down)
        self._hub.off(MOUSE_MOVE, self.on_mouse_move)
        self._hub.off(MOUSE_UP, self.on_mouse_up)
        self.attached = False

    def _collapse_rectangle(self) -> None:
        anchor = self._selection_start or Point()
        self._selection_rectangle = Box(anchor.x, anchor.y, 0, 0)

    def _cancel_drag(self) -> None:
        if self._currently_dragging:
            self._currently_dragging = False
            self._collapse_rectangle()
            self.hide_all()
            self.show_selection()

    def on_mouse_down(self, event: PointerEvent) -> None:
        if event.button is MouseButton.RIGHT and self._currently_dragging:
            # right click while dragging a marquee cancels it
            self._cancel_drag()
            self._document.request_redraw()
            return

        if event.button is MouseButton.LEFT and self._selection_enabled:
            self._selection_mode = selection_mode_for(event.shift, event.ctrl)
            self._currently_dragging = True
            self._selection_start = event.point
            self._collapse_rectangle()

    def on_mouse_move(self, event: PointerEvent) -> None:
        if not self._currently_dragging:
            return
        self._selection_rectangle = Box.from_corners(self._selection_start, event.point)
        self._show_selection()
        self._document.request_redraw()

    def on_mouse_up(self, event: PointerEvent) -> None:
        if event.button is not MouseButton.LEFT or self._selection_start is None:
            return
        start = self._selection_start
        if self._currently_dragging:
            self._update_selection()
            self._currently_dragging = False
            self._collapse_rectangle()
            self.hide_all()
            self.show_selection()
        self._selection_start = None

        if event.point == start and not self._elements_at(event.point):
            # plain click on empty canvas
            self._selection_mode = SelectionMode.RESET
            self._clear_selection()
        self._notify()
        self._document.request_redraw()

    def _elements_at(self, point: Point) -> List[CanvasElement]:
        box = Box(point.x, point.y, 0, 0)
        return [
            element
            for element in (*self._instances, *self._lines)
            if element.is_inside_selection_rectangle(box)
        ]

    # --------------------------------------------------------------------- #
    # Marquee preview / commit
    # --------------------------------------------------------------------- #

    def _show_selection(self) -> None:
        """Highlight what the marquee would select. Does not change the selection."""
        box = self._selection_rectangle
        for elements, selected in (
            (self._instances, self.currently_selected_components),
            (self._lines, self.currently_selected_lines),
        ):
            for element in elements:
                if _combine(self._selection_mode, element.is_inside_selection_rectangle(box), element in selected):
                    element.show_bounding_box()
                else:
                    element.hide_bounding_box()

    def _update_selection(self) -> None:
        """Commit the marquee to the selection lists."""
        box = self._selection_rectangle
        for elements, selected in (
            (self._instances, self.currently_selected_components),
            (self._lines, self.currently_selected_lines),
        ):
            for element in elements:
                is_selected = element in selected
                keep = _combine(self._selection_mode, element.is_inside_selection_rectangle(box), is_selected)
                if keep and not is_selected:
                    selected.append(element)
                elif not keep and is_selected:
                    selected.remove(element)
        log.debug(
            "Selection (%s): %d component(s), %d wire(s)",
            self._selection_mode.name,
            len(self.currently_selected_components),
            len(self.currently_selected_lines),
        )

    def apply_marquee(self, box: Box, mode: SelectionMode) -> None:
        """Select with a marquee without going through pointer events."""
        self._selection_mode = mode
        self._selection_rectangle = box
        self.hide_all()
        self._update_selection()
        self.show_selection()
        self._notify()

    # --------------------------------------------------------------------- #
    # Enable / disable
    # --------------------------------------------------------------------- #

    def activate_selection(self) -> None:
        self._selection_enabled = True

    def deactivate_selection(self) -> None:
        """Disable marquee selection and clear the current selection."""
        self._selection_enabled = False
        self._currently_dragging = False
        self._collapse_rectangle()
        self._selection_start = None
        self._selection_mode = SelectionMode.RESET
        if self._clear_selection():
            self._notify()

    def _clear_selection(self) -> bool:
        """Empty both selection lists. Returns whether anything was selected."""
        changed = self.has_selection()
        self.hide_all()
        self.currently_selected_components = []
        self.currently_selected_lines = []
        return changed

    def discard(self, element: CanvasElement) -> None:
        """Drop `element` from the selection, if it is selected."""
        if element.kind is ElementKind.WIRE:
            selected = self.currently_selected_lines
        else:
            selected = self.currently_selected_components
        if element in selected:
            selected.remove(element)
            element.hide_bounding_box()
            self._notify()

    # --------------------------------------------------------------------- #
    # Highlighting
    # --------------------------------------------------------------------- #

    def show_selection(self) -> None:
        for element in self.selected_elements:
            element.show_bounding_box()

    def hide_selection(self) -> None:
        for element in self.selected_elements:
            element.hide_bounding_box()

    def hide_all(self) -> None:
        for element in (*self._instances, *self._lines):
            element.hide_bounding_box()

    # --------------------------------------------------------------------- #
    # Programmatic selection
    # --------------------------------------------------------------------- #

    @staticmethod
    def _merge(current: list, elements: Sequence, mode: SelectionMode) -> list:
        if mode is SelectionMode.RESET:
            current = []
            mode = SelectionMode.ADD
        if mode is SelectionMode.ADD:
            merged = list(current)
            for element in elements:
                if element not in merged:
                    merged.append(element)
            return merged
        return [element for element in current if element not in elements]

    def select_components(self, components: Sequence["ComponentInstance"], mode: SelectionMode) -> None:
        self.hide_selection()
        self.currently_selected_components = self._merge(self.currently_selected_components, components, mode)
        self.show_selection()
        self._notify()

    def select_lines(self, lines: Sequence["Line"], mode: SelectionMode) -> None:
        self.hide_selection()
        self.currently_selected_lines = self._merge(self.currently_selected_lines, lines, mode)
        self.show_selection()
        self._notify()

    def select(self, elements: Iterable[CanvasElement], mode: SelectionMode) -> None:
        """Select a mix of components and wires."""
        elements = list(elements)
        components = [e for e in elements if e.kind is ElementKind.COMPONENT]
        lines = [e for e in elements if e.kind is ElementKind.WIRE]
        self.hide_selection()
        self.currently_selected_components = self._merge(self.currently_selected_components, components, mode)
        self.currently_selected_lines = self._merge(self.currently_selected_lines, lines, mode)
        self.show_selection()
        self._notify()

    def select_all(self) -> None:
        self.currently_selected_components = list(self._instances)
        self.currently_selected_lines = list(self._lines)
        self.show_selection()
        self._notify()

    # --------------------------------------------------------------------- #
    # Group transforms
    # --------------------------------------------------------------------- #

    def get_overall_bounding_box(self) -> Optional[Box]:
        bbox = None
        for element in (*self.currently_selected_lines, *self.currently_selected_components):
            element_box = element.bbox()
            bbox = element_box if bbox is None else bbox.merge(element_box)
        return bbox

    def rotate_selection(self, angle_deg: float) -> None:
        """
        Rotate the selection as one rigid body around the centre of its
        bounding box. Every element turns around its own anchor point and
        that point is moved along the circle around the common centre.

        Raises:
            ValueError: if wires are selected and the angle is not a multiple
                of 90 degrees. Nothing is changed in that case.
        """
        if not self.has_selection():
            return
        if self.currently_selected_lines and not float(angle_deg / 90.0).is_integer():
            raise ValueError(f"Selections with wires can only be rotated by multiples of 90 degrees, not {angle_deg}")

        overall_center = self.get_overall_bounding_box().center
        with self._document.mutation():
            for line in self.currently_selected_lines:
                center = line.get_anchor_point()
                line.rotate(angle_deg)
                line.move_rel(center.rotate(angle_deg, overall_center) - center)

            for component in self.currently_selected_components:
                center = component.get_anchor_point()
                component.rotate(angle_deg)
                component.move_to(center.rotate(angle_deg, overall_center))
                component.recalculate_snapping_points()
        log.debug("Rotated selection by %s degrees around %s", angle_deg, overall_center)

    def flip_selection(self, horizontal: bool) -> None:
        """
        Mirror the selection at the centre of its bounding box. A horizontal
        flip mirrors across the vertical axis (x changes), a vertical flip
        across the horizontal axis.
        """
        if not self.has_selection():
            return

        overall_center = self.get_overall_bounding_box().center
        flip_x = -2 if horizontal else 0
        flip_y = 0 if horizontal else -2

        with self._document.mutation():
            for element in (*self.currently_selected_lines, *self.currently_selected_components):
                diff_to_center = element.get_anchor_point() - overall_center
                element.flip(horizontal)
                element.move_rel(Point(diff_to_center.x * flip_x, diff_to_center.y * flip_y))
                element.recalculate_snapping_points()
        log.debug("Flipped selection (%s) around %s", "horizontal" if horizontal else "vertical", overall_center)

    def move_selection_rel(self, delta) -> None:
        """Move every selected element by `delta`."""
        if not self.has_selection():
            return
        delta = Point.of(delta)
        with self._document.mutation():
            for element in (*self.currently_selected_components, *self.currently_selected_lines):
                element.move_rel(delta)

    def move_selection_to(self, position) -> None:
        """Move the selection so that the centre of its bounding box lands on `position`."""
        if not self.has_selection():
            return
        overall_center = self.get_overall_bounding_box().center
        self.move_selection_rel(Point.of(position) - overall_center)

    def remove_selection(self) -> None:
        """Delete every selected wire and component from the document."""
        if not self.has_selection():
            return
        lines, components = self.currently_selected_lines, self.currently_selected_components
        self.currently_selected_components = []
        self.currently_selected_lines = []
        with self._document.mutation():
            for line in lines:
                self._document.remove_line(line)
            for component in components:
                self._document.remove_instance(component)
        self._notify()
