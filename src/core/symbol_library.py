"""
Symbol definitions shipped with the editor.

The entries use the same mapping layout as definitions read from a symbol
library file (see `core.symbol`), so they go through the same parser.
Lengths without a unit are pixels.
"""

from __future__ import annotations

from typing import Dict, List

from .symbol import ComponentSymbol, load_symbols

RESISTOR = {
    "type": "path",
    "displayName": "Resistor",
    "tikzName": "R",
    "groupName": "Passive",
    "refX": 32,
    "refY": 8,
    "viewBox": "0 0 64 16",
    "pins": [
        {"anchorName": "START", "x": -32, "y": 0},
        {"anchorName": "END", "x": 32, "y": 0},
    ],
    "textPosition": {"x": 0, "y": 12},
}

CAPACITOR = {
    "type": "path",
    "displayName": "Capacitor",
    "tikzName": "C",
    "groupName": "Passive",
    "refX": 16,
    "refY": 12,
    "viewBox": "0 0 32 24",
    "pins": [
        {"anchorName": "START", "x": -16, "y": 0},
        {"anchorName": "END", "x": 16, "y": 0},
    ],
    "textPosition": {"x": 0, "y": 16},
}

VOLTAGE_SOURCE = {
    "type": "path",
    "displayName": "Voltage source",
    "tikzName": "V",
    "groupName": "Sources",
    "refX": 24,
    "refY": 16,
    "viewBox": "0 0 48 32",
    "pins": [
        {"anchorName": "START", "x": -24, "y": 0},
        {"anchorName": "END", "x": 24, "y": 0},
        {"anchorName": "+", "x": 8, "y": 8},
        {"anchorName": "-", "x": "-8", "y": 8},
    ],
}

NMOS = {
    "type": "node",
    "displayName": "NMOS",
    "tikzName": "nmos",
    "groupName": "Transistors",
    "refX": 24,
    "refY": 24,
    "viewBox": "0 0 32 48",
    "pins": [
        {"anchorName": "G", "x": -24, "y": 0},
        {"anchorName": "D", "x": 0, "y": 24},
        {"anchorName": "S", "x": 0, "y": -24},
    ],
    "additionalAnchors": [
        {"anchorName": "center", "x": 0, "y": 0, "isDefault": "true"},
    ],
    "textPosition": {"x": 12, "y": 0},
}

OP_AMP = {
    "type": "node",
    "displayName": "Op-amp",
    "tikzName": "op amp",
    "groupName": "Amplifiers",
    "refX": 32,
    "refY": 24,
    "viewBox": "0 0 64 48",
    "pins": [
        {"anchorName": "-", "x": -32, "y": 8},
        {"anchorName": "+", "x": -32, "y": -8},
        {"anchorName": "out", "x": 32, "y": 0},
    ],
    "additionalAnchors": [
        {"anchorName": "up", "x": 0, "y": 16},
        {"anchorName": "down", "x": 0, "y": -16},
    ],
}

GROUND = {
    "type": "node",
    "displayName": "Ground",
    "tikzName": "ground",
    "groupName": "Supply",
    "refX": 8,
    "refY": 0,
    "viewBox": "0 0 16 12",
    "pins": [
        {"anchorName": "center", "x": 0, "y": 0, "isDefault": "true"},
    ],
}

BUILTIN_DEFINITIONS = [RESISTOR, CAPACITOR, VOLTAGE_SOURCE, NMOS, OP_AMP, GROUND]


def builtin_symbols() -> List[ComponentSymbol]:
    return load_symbols(BUILTIN_DEFINITIONS)


def symbols_by_group(symbols: List[ComponentSymbol]) -> Dict[str, List[ComponentSymbol]]:
    """Group symbols for the palette, keeping their order."""
    groups: Dict[str, List[ComponentSymbol]] = {}
    for symbol in symbols:
        groups.setdefault(symbol.group_name or "Other", []).append(symbol)
    return groups
