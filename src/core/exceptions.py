"""
Exceptions raised by the schematic canvas core.
"""

from __future__ import annotations


class CanvasError(RuntimeError):
    """Base class for errors raised by the canvas core."""
    pass


class MissingMetadataError(CanvasError):
    """
    A symbol definition lacks the metadata needed to place it
    (display name or TikZ name).
    """
    pass


class UseAfterRemoveError(CanvasError):
    """A SnapPoint was recalculated after its owning instance was removed."""
    pass
