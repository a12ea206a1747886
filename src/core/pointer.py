"""
Pointer events delivered by the canvas.

The canvas (the Qt view, or a test) converts raw input to world coordinates
and emits `PointerEvent`s through a `PointerEventHub`. Interaction engines
subscribe while they are active and unsubscribe when they are deactivated.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List

from .geometry import Point

log = logging.getLogger(__name__)

MOUSE_DOWN = "mousedown"
MOUSE_MOVE = "mousemove"
MOUSE_UP = "mouseup"
CLICK = "click"

EVENT_TYPES = (MOUSE_DOWN, MOUSE_MOVE, MOUSE_UP, CLICK)


class MouseButton(Enum):
    LEFT = 0
    MIDDLE = 1
    RIGHT = 2


@dataclass(frozen=True)
class PointerEvent:
    point: Point
    button: MouseButton = MouseButton.LEFT
    shift: bool = False
    ctrl: bool = False  # also set for the command key on macOS


PointerHandler = Callable[[PointerEvent], None]


class PointerEventHub:
    """Minimal on/off/emit event registry for canvas pointer events."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[PointerHandler]] = defaultdict(list)

    def on(self, event_type: str, handler: PointerHandler) -> None:
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown pointer event type: {event_type}")
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def off(self, event_type: str, handler: PointerHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handler_count(self, event_type: str) -> int:
        return len(self._handlers.get(event_type, []))

    def emit(self, event_type: str, event: PointerEvent) -> None:
        # snapshot: handlers may (un)register while the event is delivered
        for handler in list(self._handlers.get(event_type, [])):
            handler(event)
