"""Pytest fixtures for the schematic canvas tests."""

import os

import pytest

# Qt tests must not need a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from core.components import NodeComponentInstance, PathComponentInstance
from core.document import SchematicDocument
from core.geometry import Point
from core.pointer import CLICK, MOUSE_DOWN, MOUSE_MOVE, MOUSE_UP, MouseButton, PointerEvent
from core.settings import EditorSettings
from core.symbol import create_symbol

# Transistor-like node symbol, 20x20 with the mid point in the centre.
NMOS_DEFINITION = {
    "type": "node",
    "displayName": "NMOS",
    "tikzName": "nmos",
    "refX": 10,
    "refY": 10,
    "viewBox": "0 0 20 20",
    "pins": [
        {"anchorName": "G", "x": -10, "y": 0, "isDefault": "true"},
        {"anchorName": "D", "x": 0, "y": 10},
        {"anchorName": "S", "x": 0, "y": -10},
    ],
    "textPosition": {"x": 5, "y": 5},
}

# Resistor-like path symbol, 40x10, with one extra pin above the body.
RESISTOR_DEFINITION = {
    "type": "path",
    "displayName": "Resistor",
    "tikzName": "R",
    "refX": 20,
    "refY": 5,
    "viewBox": "0 0 40 10",
    "pins": [
        {"anchorName": "START", "x": -20, "y": 0},
        {"anchorName": "END", "x": 20, "y": 0},
        {"anchorName": "wiper", "x": 0, "y": 5},
    ],
}


@pytest.fixture
def nmos_symbol():
    return create_symbol(NMOS_DEFINITION)


@pytest.fixture
def resistor_symbol():
    return create_symbol(RESISTOR_DEFINITION)


@pytest.fixture
def settings():
    """Grid of 8 px and snap radius of 10 px (the defaults, spelled out)."""
    return EditorSettings(grid_size=8.0, snap_radius=10.0)


@pytest.fixture
def document(settings):
    return SchematicDocument(settings)


@pytest.fixture
def make_node(nmos_symbol):
    """Factory for NMOS instances at a given position (the symbol mid)."""
    counter = iter(range(1, 1000))

    def _make(x, y, name=None):
        n = next(counter)
        return NodeComponentInstance(nmos_symbol, f"node-{n}", Point(x, y), name or f"Q{n}")

    return _make


@pytest.fixture
def make_resistor(resistor_symbol):
    counter = iter(range(1, 1000))

    def _make(start, end, name=None):
        n = next(counter)
        return PathComponentInstance(resistor_symbol, f"path-{n}", Point(*start), Point(*end), name or f"R{n}")

    return _make


def pointer(x, y, button=MouseButton.LEFT, shift=False, ctrl=False):
    return PointerEvent(Point(x, y), button, shift, ctrl)


@pytest.fixture
def drag():
    """Drag the left button from `start` to `end` on a document's canvas."""

    def _drag(document, start, end, shift=False, ctrl=False):
        hub = document.hub
        hub.emit(MOUSE_DOWN, pointer(*start, shift=shift, ctrl=ctrl))
        hub.emit(MOUSE_MOVE, pointer(*end, shift=shift, ctrl=ctrl))
        hub.emit(MOUSE_UP, pointer(*end, shift=shift, ctrl=ctrl))
        hub.emit(CLICK, pointer(*end, shift=shift, ctrl=ctrl))

    return _drag


@pytest.fixture
def click():
    """Press and release the left button at one point."""

    def _click(document, x, y, shift=False, ctrl=False):
        hub = document.hub
        hub.emit(MOUSE_DOWN, pointer(x, y, shift=shift, ctrl=ctrl))
        hub.emit(MOUSE_UP, pointer(x, y, shift=shift, ctrl=ctrl))
        hub.emit(CLICK, pointer(x, y, shift=shift, ctrl=ctrl))

    return _click
