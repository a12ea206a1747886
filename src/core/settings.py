"""
Editor settings shared by the snapping, routing and export code.

All distances are in canvas pixels unless stated otherwise.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace

from .units import UNIT_FACTORS

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditorSettings:
    """Tunable parameters of the canvas."""

    grid_size: float = 8.0
    """Spacing of the snapping grid."""

    snap_radius: float = 10.0
    """Maximum distance between pointer and snap target."""

    px_per_cm: float = UNIT_FACTORS["cm"]
    """Conversion used when exporting coordinates to TikZ."""

    tikz_decimals: int = 2
    """Digits after the decimal point in exported coordinates."""

    min_zoom: float = 0.1
    max_zoom: float = 10.0

    @classmethod
    def from_env(cls, prefix: str = "SCHEMATIC_") -> "EditorSettings":
        """
        Build settings with overrides from the environment, e.g.
        SCHEMATIC_GRID_SIZE=10 or SCHEMATIC_SNAP_RADIUS=6.
        """
        settings = cls()
        overrides = {}
        for name in ("grid_size", "snap_radius"):
            raw = os.environ.get(prefix + name.upper())
            if raw is None:
                continue
            try:
                overrides[name] = float(raw)
            except ValueError:
                log.warning("Ignoring %s%s=%r: not a number", prefix, name.upper(), raw)
        if overrides:
            settings = replace(settings, **overrides)
        return settings


DEFAULT_SETTINGS = EditorSettings()
