"""Binary selection masks and the geometry derived from them."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..config import FEATHER_CUTOFF, MASK_OFF, MASK_ON
from ..errors import EmptySelectionError, InvalidDimensionsError
from .buffer import PixelBuffer


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned pixel rectangle."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


EMPTY_BOUNDS = Bounds()


def compute_bounds(pixels: np.ndarray, width: int, height: int) -> Bounds:
    """Return the tight bounding box of the set entries of *pixels*."""

    if width <= 0 or height <= 0:
        return EMPTY_BOUNDS
    grid = pixels.reshape((height, width)) != 0
    rows = np.flatnonzero(grid.any(axis=1))
    if rows.size == 0:
        return EMPTY_BOUNDS
    cols = np.flatnonzero(grid.any(axis=0))
    return Bounds(
        x=int(cols[0]),
        y=int(rows[0]),
        width=int(cols[-1] - cols[0] + 1),
        height=int(rows[-1] - rows[0] + 1),
    )


def compute_border_indices(
    pixels: np.ndarray,
    width: int,
    height: int,
    bounds: Bounds,
) -> np.ndarray:
    """Return flat indices of set pixels touching an unset 4-neighbour.

    Positions outside the canvas count as unset, so a selection reaching the
    image edge is outlined along that edge.  Only the rows and columns inside
    *bounds* are scanned; indices come back in ascending row-major order.
    """

    if bounds.is_empty:
        return np.zeros(0, dtype=np.int64)

    grid = pixels.reshape((height, width)) != 0
    x0, y0 = bounds.x, bounds.y
    x1, y1 = x0 + bounds.width, y0 + bounds.height

    # One pixel of context around the bounds, padded with False at the canvas edge.
    padded = np.zeros((bounds.height + 2, bounds.width + 2), dtype=bool)
    src_x0, src_y0 = max(0, x0 - 1), max(0, y0 - 1)
    src_x1, src_y1 = min(width, x1 + 1), min(height, y1 + 1)
    padded[
        src_y0 - (y0 - 1) : src_y1 - (y0 - 1),
        src_x0 - (x0 - 1) : src_x1 - (x0 - 1),
    ] = grid[src_y0:src_y1, src_x0:src_x1]

    centre = padded[1:-1, 1:-1]
    interior = (
        padded[1:-1, :-2]
        & padded[1:-1, 2:]
        & padded[:-2, 1:-1]
        & padded[2:, 1:-1]
    )
    local_y, local_x = np.nonzero(centre & ~interior)
    return ((local_y + y0) * width + (local_x + x0)).astype(np.int64)


def feather_mask(pixels: np.ndarray, width: int, height: int, radius: int) -> np.ndarray:
    """Return a copy of *pixels* smoothed by a ``(2r+1)`` square box average.

    The average only counts kernel cells inside the canvas.  A set pixel stays
    set when its neighbourhood average exceeds :data:`FEATHER_CUTOFF`; unset
    pixels are never switched on, so feathering only trims ragged edges and
    isolated specks while keeping the mask binary.
    """

    binary = pixels.reshape((height, width)) != 0
    if radius <= 0 or width <= 0 or height <= 0:
        return np.where(binary, MASK_ON, MASK_OFF).astype(np.uint8).reshape(-1)

    # Summed-area table with a leading row/column of zeros.
    table = np.zeros((height + 1, width + 1), dtype=np.int64)
    table[1:, 1:] = np.cumsum(np.cumsum(binary, axis=0, dtype=np.int64), axis=1)

    ys = np.arange(height)
    xs = np.arange(width)
    top = np.clip(ys - radius, 0, height)[:, None]
    bottom = np.clip(ys + radius + 1, 0, height)[:, None]
    left = np.clip(xs - radius, 0, width)[None, :]
    right = np.clip(xs + radius + 1, 0, width)[None, :]

    window_sum = table[bottom, right] - table[top, right] - table[bottom, left] + table[top, left]
    window_area = (bottom - top) * (right - left)
    average = window_sum * float(MASK_ON) / np.maximum(window_area, 1)

    keep = binary & (average > FEATHER_CUTOFF)
    return np.where(keep, MASK_ON, MASK_OFF).astype(np.uint8).reshape(-1)


@dataclass(frozen=True, eq=False)
class SelectionMask:
    """A binary selection over a ``width`` x ``height`` canvas.

    ``pixels`` holds one byte per pixel (``0`` or ``255``).  Instances are
    built through :meth:`from_pixels` (or the other constructors), which derive
    ``bounds`` and ``border_indices`` from the bitmap; both arrays are
    read-only so a returned mask can be shared freely and chained into further
    additive or subtractive selections without being modified.
    """

    width: int
    height: int
    pixels: np.ndarray
    border_indices: np.ndarray
    bounds: Bounds

    @classmethod
    def from_pixels(cls, width: int, height: int, pixels: np.ndarray) -> SelectionMask:
        """Return a mask for *pixels*, normalising every non-zero entry to ``255``."""

        source = np.asarray(pixels)
        if source.size != width * height:
            raise InvalidDimensionsError(
                f"Mask of {source.size} entries does not match {width}x{height}"
            )
        bitmap = np.where(source.reshape(-1) != 0, MASK_ON, MASK_OFF).astype(np.uint8)
        bounds = compute_bounds(bitmap, width, height)
        border = compute_border_indices(bitmap, width, height, bounds)
        bitmap.flags.writeable = False
        border.flags.writeable = False
        return cls(width=width, height=height, pixels=bitmap, border_indices=border, bounds=bounds)

    @classmethod
    def empty(cls, width: int, height: int) -> SelectionMask:
        return cls.from_pixels(width, height, np.zeros(width * height, dtype=np.uint8))

    @classmethod
    def full(cls, width: int, height: int) -> SelectionMask:
        return cls.from_pixels(width, height, np.full(width * height, MASK_ON, dtype=np.uint8))

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> SelectionMask:
        """Rebuild a mask from the raw bitmap produced by :meth:`to_bytes`."""

        return cls.from_pixels(width, height, np.frombuffer(data, dtype=np.uint8))

    def to_bytes(self) -> bytes:
        """Return the raw bitmap, one byte (``0`` or ``255``) per pixel."""

        return self.pixels.tobytes()

    @property
    def is_empty(self) -> bool:
        return self.bounds.is_empty

    @property
    def count(self) -> int:
        """Number of selected pixels."""

        return int(np.count_nonzero(self.pixels))

    def contains(self, x: int, y: int) -> bool:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return False
        return bool(self.pixels[y * self.width + x])

    def grid(self) -> np.ndarray:
        """Return a read-only ``(H, W)`` view of the bitmap."""

        return self.pixels.reshape((self.height, self.width))

    def matches(self, width: int, height: int) -> bool:
        return self.width == width and self.height == height

    def _check_compatible(self, other: SelectionMask) -> None:
        if not other.matches(self.width, self.height):
            raise InvalidDimensionsError(
                f"Cannot combine a {other.width}x{other.height} mask with a "
                f"{self.width}x{self.height} mask"
            )

    def union(self, other: SelectionMask) -> SelectionMask:
        self._check_compatible(other)
        return SelectionMask.from_pixels(self.width, self.height, self.pixels | other.pixels)

    def intersect(self, other: SelectionMask) -> SelectionMask:
        self._check_compatible(other)
        return SelectionMask.from_pixels(self.width, self.height, self.pixels & other.pixels)

    def difference(self, other: SelectionMask) -> SelectionMask:
        """Return the pixels selected here but not in *other*."""

        self._check_compatible(other)
        return SelectionMask.from_pixels(
            self.width, self.height, self.pixels & ~other.pixels
        )

    def invert(self) -> SelectionMask:
        return SelectionMask.from_pixels(
            self.width, self.height, self.pixels == MASK_OFF
        )

    def feathered(self, radius: int) -> SelectionMask:
        return SelectionMask.from_pixels(
            self.width,
            self.height,
            feather_mask(self.pixels, self.width, self.height, int(radius)),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SelectionMask):
            return NotImplemented
        return (
            self.matches(other.width, other.height)
            and np.array_equal(self.pixels, other.pixels)
        )

    __hash__ = None  # type: ignore[assignment]


def crop_to_selection(buffer: PixelBuffer, mask: SelectionMask) -> PixelBuffer:
    """Return the part of *buffer* covered by the bounding box of *mask*."""

    if not mask.matches(buffer.width, buffer.height):
        raise InvalidDimensionsError(
            f"Mask is {mask.width}x{mask.height} but buffer is {buffer.width}x{buffer.height}"
        )
    if mask.is_empty:
        raise EmptySelectionError("Cannot crop to an empty selection")
    return buffer.crop(mask.bounds)


__all__ = [
    "Bounds",
    "EMPTY_BOUNDS",
    "SelectionMask",
    "compute_border_indices",
    "compute_bounds",
    "crop_to_selection",
    "feather_mask",
]
