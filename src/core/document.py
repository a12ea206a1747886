"""
One open schematic: its components and wires, the interaction engines that
edit them, and the TikZ export.

The document is the single owner of the element lists and of the id
registry through which SnapPoints find their owner's name. It also owns the
selection engine and the line router and makes sure only one of them
listens to the canvas at a time.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional

from .components import ComponentInstance, NodeComponentInstance, PathComponentInstance
from .geometry import Point
from .line import Line
from .line_router import LineRouter
from .pointer import PointerEventHub
from .selection import SelectionEngine
from .settings import DEFAULT_SETTINGS, EditorSettings
from .snap_point import SnapPoint
from .snapping import GridSnapController, SnapController, SnapCursor
from .symbol import ComponentSymbol

log = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


class InteractionMode(Enum):
    SELECT = "select"
    WIRE = "wire"


def _name_prefix(symbol: ComponentSymbol) -> str:
    letters = "".join(ch for ch in symbol.tikz_name if ch.isalpha())
    return (letters[:1] or "X").upper()


class SchematicDocument:
    def __init__(
        self,
        settings: EditorSettings = DEFAULT_SETTINGS,
        snapper: Optional[SnapController] = None,
        cursor: Optional[SnapCursor] = None,
    ):
        self.settings = settings
        self.instances: List[ComponentInstance] = []
        self.lines: List[Line] = []
        self._registry: Dict[str, ComponentInstance] = {}
        self._name_counters: Dict[str, int] = {}

        self._before_change: List[ChangeListener] = []
        self._after_change: List[ChangeListener] = []
        self._mutation_depth = 0

        self.hub = PointerEventHub()
        self.snapper: SnapController = snapper or GridSnapController(settings, self.snap_targets)
        self.selection = SelectionEngine(self)
        self.line_router = LineRouter(
            self.hub,
            self.snapper,
            on_line_finished=self.add_line,
            cursor=cursor,
            on_change=self.request_redraw,
        )
        self._mode: Optional[InteractionMode] = None
        self.set_mode(InteractionMode.SELECT)

    # --------------------------------------------------------------------- #
    # Redraw hooks
    # --------------------------------------------------------------------- #

    def add_change_listeners(
        self,
        before: Optional[ChangeListener] = None,
        after: Optional[ChangeListener] = None,
    ) -> None:
        if before is not None:
            self._before_change.append(before)
        if after is not None:
            self._after_change.append(after)

    @contextmanager
    def mutation(self) -> Iterator[None]:
        """
        Wrap changes to the element lists or geometry. Listeners are told
        before the first change and after the last one of nested blocks.
        """
        if self._mutation_depth == 0:
            for listener in list(self._before_change):
                listener()
        self._mutation_depth += 1
        try:
            yield
        finally:
            self._mutation_depth -= 1
            if self._mutation_depth == 0:
                for listener in list(self._after_change):
                    listener()

    def request_redraw(self) -> None:
        """Ask for a redraw after a change that did not go through `mutation()`."""
        if self._mutation_depth == 0:
            for listener in list(self._after_change):
                listener()

    # --------------------------------------------------------------------- #
    # Interaction mode
    # --------------------------------------------------------------------- #

    @property
    def mode(self) -> Optional[InteractionMode]:
        return self._mode

    def set_mode(self, mode: InteractionMode) -> None:
        """Switch between selecting and drawing wires."""
        if mode is self._mode:
            return
        if mode is InteractionMode.WIRE:
            self.selection.deactivate_selection()
            self.selection.detach()
            self.line_router.activate()
        else:
            self.line_router.deactivate()
            self.selection.attach()
            self.selection.activate_selection()
        self._mode = mode
        log.info("Interaction mode: %s", mode.value)
        self.request_redraw()

    # --------------------------------------------------------------------- #
    # Elements
    # --------------------------------------------------------------------- #

    def new_instance_id(self) -> str:
        return uuid.uuid4().hex

    def next_node_name(self, symbol: ComponentSymbol) -> str:
        """Generate a unique node name such as "R1" or "Q3"."""
        prefix = _name_prefix(symbol)
        used = {instance.node_name for instance in self.instances}
        while True:
            self._name_counters[prefix] = self._name_counters.get(prefix, 0) + 1
            name = f"{prefix}{self._name_counters[prefix]}"
            if name not in used:
                return name

    def place_component(
        self,
        symbol: ComponentSymbol,
        position=None,
        end=None,
        node_name: Optional[str] = None,
    ) -> ComponentInstance:
        """
        Create and add an instance of `symbol`.

        Node symbols are placed with their default anchor on `position`.
        Path symbols are drawn from `position` to `end`.
        """
        instance_id = self.new_instance_id()
        if node_name is None:
            node_name = self.next_node_name(symbol)
        position = Point.of(position) if position is not None else Point()

        if symbol.is_path:
            end = Point.of(end) if end is not None else position
            instance = PathComponentInstance(symbol, instance_id, position, end, node_name)
        else:
            instance = NodeComponentInstance(symbol, instance_id, Point(), node_name)
            instance.place_default_anchor_at(position)
        self.add_instance(instance)
        return instance

    def add_instance(self, instance: ComponentInstance) -> None:
        with self.mutation():
            self.instances.append(instance)
            self._registry[instance.id] = instance
        log.debug("Added %r", instance)

    def remove_instance(self, instance: ComponentInstance) -> None:
        with self.mutation():
            if instance in self.instances:
                self.instances.remove(instance)
            self._registry.pop(instance.id, None)
            self.selection.discard(instance)
            instance.remove()

    def add_line(self, line: Line) -> None:
        with self.mutation():
            self.lines.append(line)
        log.debug("Added %r", line)

    def remove_line(self, line: Line) -> None:
        with self.mutation():
            if line in self.lines:
                self.lines.remove(line)
            self.selection.discard(line)
            line.remove()

    def get_instance(self, instance_id: str) -> Optional[ComponentInstance]:
        return self._registry.get(instance_id)

    def node_name_of(self, instance_id: str) -> Optional[str]:
        instance = self._registry.get(instance_id)
        return instance.node_name if instance is not None else None

    def snap_targets(self) -> List[SnapPoint]:
        """Every live SnapPoint of every placed component."""
        return [point for instance in self.instances for point in instance.snapping_points]

    # --------------------------------------------------------------------- #
    # Export
    # --------------------------------------------------------------------- #

    def to_tikz(self) -> str:
        body = [
            element.to_tikz_string(self.node_name_of, self.settings)
            for element in (*self.instances, *self.lines)
        ]
        return "\n".join(["\\begin{circuitikz}", *("\t" + line for line in body), "\\end{circuitikz}"])
