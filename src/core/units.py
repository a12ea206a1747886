"""
Length units used by symbol metadata and the TikZ export.

Symbol definitions may give lengths as plain numbers (pixels) or as
unit-suffixed strings ("3mm", "0.5cm", "-2pt"). The canvas works in CSS
pixels (96 per inch); the TikZ export works in centimetres.
"""

from __future__ import annotations

import re
from typing import Optional, Union

PX_PER_INCH = 96.0

# px per unit
UNIT_FACTORS = {
    "": 1.0,
    "px": 1.0,
    "in": PX_PER_INCH,
    "cm": PX_PER_INCH / 2.54,
    "mm": PX_PER_INCH / 25.4,
    "pt": PX_PER_INCH / 72.0,
    "pc": PX_PER_INCH / 6.0,
}

_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-z]*)\s*$")

# "1", ".1", "1.1"; but not "1."
_PLAIN_NUMBER_RE = re.compile(r"^(\d*\.)?\d+$")


def is_plain_number(text: str) -> bool:
    """True for unsigned decimal literals without a unit."""
    return bool(_PLAIN_NUMBER_RE.match(text))


def parse_length(value: Union[str, float, int, None]) -> Optional[float]:
    """
    Convert a length to pixels.

    Returns None if `value` is a string that is not a length
    (unknown unit or not a number at all).
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    match = _LENGTH_RE.match(value)
    if not match:
        return None
    number, unit = match.groups()
    factor = UNIT_FACTORS.get(unit.lower())
    if factor is None:
        return None
    return float(number) * factor


def ensure_in_px(value: Union[str, float, int, None]) -> float:
    """Like `parse_length`, but malformed values count as 0 px."""
    px = parse_length(value)
    return 0.0 if px is None else px


def px_to_cm(px: float, px_per_cm: float = UNIT_FACTORS["cm"]) -> float:
    return px / px_per_cm


def format_number(value: float, decimals: int = 2) -> str:
    """Round and strip trailing zeros: 1.50 -> "1.5", 2.00 -> "2", -0.0 -> "0"."""
    rounded = round(value, decimals)
    if rounded == 0:
        rounded = 0.0
    text = f"{rounded:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
