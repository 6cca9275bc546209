"""Exception hierarchy shared across the editing engine."""

from __future__ import annotations


class IEditError(Exception):
    """Base class for errors raised by :mod:`iEdit`."""


class InvalidSeedError(IEditError, IndexError):
    """Raised when a selection seed lies outside the pixel buffer."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"Seed ({x}, {y}) is outside the {width}x{height} buffer")
        self.x = x
        self.y = y
        self.width = width
        self.height = height


class InvalidDimensionsError(IEditError, ValueError):
    """Raised when buffers or masks with mismatching sizes are combined."""


class EmptySelectionError(IEditError):
    """Raised by operations that require a selection with a non-zero area.

    An empty mask is a valid result of :func:`iEdit.core.selection.select_region`;
    callers inspect :attr:`SelectionMask.is_empty` instead of catching this
    error.  Only helpers that cannot produce a meaningful result without a
    region (for example :func:`iEdit.core.mask.crop_to_selection`) raise it.
    """
