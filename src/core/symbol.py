"""
Component symbols and their anchors.

A symbol definition is the metadata block of a CircuiTikZ shape: its names,
its reference point ("mid", TikZ's (0,0) inside the symbol graphic) and the
list of pins/anchors. Reading that metadata from the symbol library file is
done elsewhere; this module receives it as a plain mapping, e.g.:

    {
        "type": "node",
        "displayName": "NMOS",
        "tikzName": "nmos",
        "refX": 12, "refY": 24,
        "viewBox": "0 0 24 48",
        "pins": [{"anchorName": "G", "x": -0.5, "y": 0}, ...],
        "additionalAnchors": [{"anchorName": "center", "isDefault": "true"}],
        "textPosition": {"x": 0, "y": 10},
    }

Anchor coordinates use TikZ orientation (y grows upward) while the canvas y
grows downward, so anchor points are `(mid.x + x, mid.y - y)`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

from .exceptions import MissingMetadataError
from .geometry import Box, Point
from .units import ensure_in_px, is_plain_number, parse_length

log = logging.getLogger(__name__)

Length = Union[float, str]


@dataclass(frozen=True)
class Anchor:
    """
    A named point of a symbol.

    `x`/`y` keep the value from the definition (a float, or the raw string if
    it was not a plain number); `point` is the resolved position in symbol
    coordinates.
    """
    name: Optional[str]
    x: Length
    y: Length
    point: Point
    is_default: bool = False


@dataclass
class SymbolBaseInformation:
    is_node: bool
    is_path: bool
    display_name: Optional[str]
    tikz_name: Optional[str]
    shape_name: Optional[str]
    group_name: Optional[str]
    mid: Point
    view_box: Optional[Box]
    component_information: Optional[Mapping[str, Any]] = None


def _parse_view_box(value) -> Optional[Box]:
    if value is None:
        return None
    if isinstance(value, str):
        parts = value.replace(",", " ").split()
    else:
        parts = list(value)
    if len(parts) != 4:
        log.warning("Ignoring malformed viewBox %r", value)
        return None
    x, y, width, height = (ensure_in_px(p) for p in parts)
    return Box(x, y, width, height)


def _attr(element: Mapping[str, Any], *names: str, default=None):
    for name in names:
        value = element.get(name)
        if value is not None and value != "":
            return value
    return default


class ComponentSymbol:
    """
    Parsed symbol definition: names, mid point, pins and anchors.

    Raises:
        MissingMetadataError: if the display name or TikZ name is missing.
    """

    is_path = False

    def __init__(
        self,
        metadata: Optional[Mapping[str, Any]],
        base_information: Optional[SymbolBaseInformation] = None,
    ):
        if base_information is None:
            base_information = self.get_base_information(metadata)
        if not base_information.display_name or not base_information.tikz_name:
            raise MissingMetadataError(
                f"Missing metadata for creating the component: {metadata!r}"
            )

        self.display_name: str = base_information.display_name
        self.tikz_name: str = base_information.tikz_name
        self.shape_name = base_information.shape_name
        self.group_name = base_information.group_name
        self.mid: Point = base_information.mid
        self.view_box: Optional[Box] = base_information.view_box

        self._default_anchor: Optional[Anchor] = None

        info = base_information.component_information or {}
        self._pins: List[Anchor] = [self._parse_anchor(a) for a in info.get("pins") or []]
        self._additional_anchors: List[Anchor] = [
            self._parse_anchor(a) for a in info.get("additionalAnchors") or []
        ]
        text_position = info.get("textPosition")
        self._text_anchor: Optional[Anchor] = (
            self._parse_anchor(text_position) if text_position else None
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.tikz_name!r})"

    @staticmethod
    def get_base_information(metadata: Optional[Mapping[str, Any]]) -> SymbolBaseInformation:
        """Extract the identifying fields of a symbol definition without parsing anchors."""
        info = metadata or {}
        symbol_type = info.get("type")
        tikz_name = info.get("tikzName")
        return SymbolBaseInformation(
            is_node=symbol_type == "node",
            is_path=symbol_type == "path",
            display_name=info.get("displayName") or tikz_name,
            tikz_name=tikz_name,
            shape_name=info.get("shapeName"),
            group_name=info.get("groupName"),
            mid=Point(ensure_in_px(info.get("refX") or 0), ensure_in_px(info.get("refY") or 0)),
            view_box=_parse_view_box(info.get("viewBox")),
            component_information=metadata,
        )

    def _parse_anchor(self, element: Mapping[str, Any]) -> Anchor:
        """
        Parse a pin, anchor or text position. A default anchor replaces any
        previously parsed one.
        """
        name = _attr(element, "anchorName", "anchorname")
        x = _attr(element, "x", default=0)
        y = _attr(element, "y", default=0)
        is_default = _attr(element, "isDefault", "isdefault", default=False)

        if isinstance(x, str) and is_plain_number(x):
            x = float(x)
        if isinstance(y, str) and is_plain_number(y):
            y = float(y)
        if not isinstance(is_default, bool):
            is_default = str(is_default) == "true"

        for axis, value in (("x", x), ("y", y)):
            if isinstance(value, str) and parse_length(value) is None:
                log.warning(
                    "Symbol %s: anchor %s has malformed %s=%r; using 0",
                    self.tikz_name, name, axis, value,
                )

        anchor = Anchor(
            name=name,
            x=x,
            y=y,
            # TikZ y direction != canvas y direction
            point=Point(self.mid.x + ensure_in_px(x), self.mid.y - ensure_in_px(y)),
            is_default=is_default,
        )
        if anchor.is_default:
            if self._default_anchor is not None:
                log.debug(
                    "Symbol %s: default anchor %s replaced by %s",
                    self.tikz_name, self._default_anchor.name, anchor.name,
                )
            self._default_anchor = anchor
        return anchor

    @property
    def pins(self) -> List[Anchor]:
        return list(self._pins)

    @property
    def additional_anchors(self) -> List[Anchor]:
        return list(self._additional_anchors)

    @property
    def text_anchor(self) -> Optional[Anchor]:
        return self._text_anchor

    @property
    def default_anchor(self) -> Optional[Anchor]:
        return self._default_anchor

    @property
    def snapping_anchors(self) -> List[Anchor]:
        """Pins and additional anchors; the text anchor is not a snap target."""
        return [*self._pins, *self._additional_anchors]

    @property
    def snapping_points(self) -> List[Point]:
        return [anchor.point for anchor in self.snapping_anchors]

    def relative_point(self, anchor: Anchor) -> Point:
        """Anchor position relative to the symbol's mid point (canvas orientation)."""
        return anchor.point - self.mid

    def anchor(self, name: str) -> Optional[Anchor]:
        for candidate in (*self.snapping_anchors, self._text_anchor):
            if candidate is not None and candidate.name == name:
                return candidate
        return None


class NodeComponentSymbol(ComponentSymbol):
    """Node-style symbol, placed at a single point (transistors, ground, ...)."""
    pass


class PathComponentSymbol(ComponentSymbol):
    """
    Path-style symbol, drawn between two points (resistors, sources, ...).

    The pins named START and END are where the connecting path begins and
    ends; they are kept apart from the other pins.
    """

    is_path = True

    def __init__(
        self,
        metadata: Optional[Mapping[str, Any]],
        base_information: Optional[SymbolBaseInformation] = None,
    ):
        super().__init__(metadata, base_information)
        self.start_pin: Optional[Anchor] = None
        self.end_pin: Optional[Anchor] = None

        remaining = []
        for pin in self._pins:
            if pin.name == "START":
                self.start_pin = pin
            elif pin.name == "END":
                self.end_pin = pin
            else:
                remaining.append(pin)
        self._pins = remaining

    @property
    def length(self) -> float:
        """Distance between the START and END pins (0 if either is missing)."""
        if self.start_pin is None or self.end_pin is None:
            return 0.0
        return self.start_pin.point.distance(self.end_pin.point)


def create_symbol(metadata: Mapping[str, Any]) -> ComponentSymbol:
    """Create a node or path symbol depending on the definition's `type`."""
    base = ComponentSymbol.get_base_information(metadata)
    if base.is_path:
        return PathComponentSymbol(metadata, base)
    return NodeComponentSymbol(metadata, base)


def load_symbols(definitions: Sequence[Mapping[str, Any]]) -> List[ComponentSymbol]:
    """
    Create symbols from a list of definitions, skipping (and logging) the
    ones that lack required metadata.
    """
    symbols = []
    for definition in definitions:
        try:
            symbols.append(create_symbol(definition))
        except MissingMetadataError as exc:
            log.warning("Skipping symbol: %s", exc)
    return symbols
