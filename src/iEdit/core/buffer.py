"""Immutable RGBA8 pixel buffers backed by NumPy arrays."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np
from PIL import Image

from ..errors import InvalidDimensionsError

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .mask import Bounds


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def _is_sealed(array: np.ndarray) -> bool:
    """Return ``True`` when no array in *array*'s base chain can be written.

    A read-only view over writable memory is not sealed: whoever holds the
    writable base can still change the samples underneath it.
    """

    current: object = array
    while isinstance(current, np.ndarray):
        if current.flags.writeable:
            return False
        current = current.base
    return current is None


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """A ``width`` x ``height`` grid of RGBA samples stored as a flat ``uint8`` array.

    The array is flagged read-only on construction so neither the engine nor
    callers holding a reference can modify a frame in place.  Every operation
    that changes pixels allocates a fresh buffer, which keeps the caller's
    original available for undo and before/after previews.
    """

    width: int
    height: int
    data: np.ndarray

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise InvalidDimensionsError(
                f"Buffer dimensions must be non-negative, got {self.width}x{self.height}"
            )
        source = np.asarray(self.data)
        expected = self.width * self.height * 4
        if source.size != expected:
            raise InvalidDimensionsError(
                f"Expected {expected} RGBA bytes for {self.width}x{self.height}, got {source.size}"
            )
        # Sealed arrays (typically produced by the engine itself) are adopted
        # as-is; anything the caller could still write through is copied.
        if source.dtype == np.uint8 and source.flags.c_contiguous and _is_sealed(source):
            flat = source.reshape(-1)
        else:
            flat = np.array(source, dtype=np.uint8, order="C").reshape(-1)
        object.__setattr__(self, "data", _readonly(flat))

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        color: Sequence[int] = (0, 0, 0, 255),
    ) -> PixelBuffer:
        """Return a buffer filled with a single RGBA (or RGB, opaque) colour."""

        rgba = tuple(int(channel) for channel in color)
        if len(rgba) == 3:
            rgba = rgba + (255,)
        if len(rgba) != 4:
            raise ValueError("color must provide three or four channels")
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[...] = np.asarray(rgba, dtype=np.uint8)
        return cls(width, height, _readonly(data))

    @classmethod
    def from_array(cls, array: np.ndarray) -> PixelBuffer:
        """Wrap a ``(H, W, 4)`` or ``(H, W, 3)`` ``uint8`` array.

        RGB input gains an opaque alpha channel.  The array is always copied.
        """

        source = np.asarray(array)
        if source.ndim != 3 or source.shape[2] not in (3, 4):
            raise InvalidDimensionsError(
                f"Expected an (H, W, 3) or (H, W, 4) array, got shape {source.shape}"
            )
        height, width = source.shape[:2]
        rgba = np.empty((height, width, 4), dtype=np.uint8)
        rgba[..., : source.shape[2]] = source.astype(np.uint8, copy=False)
        if source.shape[2] == 3:
            rgba[..., 3] = 255
        return cls(width, height, _readonly(rgba))

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelBuffer:
        """Return a buffer holding *image* converted to RGBA."""

        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return cls.from_array(np.asarray(rgba, dtype=np.uint8))

    def to_image(self) -> Image.Image:
        """Return a Pillow ``RGBA`` image holding a copy of the pixels."""

        return Image.fromarray(np.array(self.pixels()))

    @property
    def size(self) -> int:
        """Number of pixels in the buffer."""

        return self.width * self.height

    def pixels(self) -> np.ndarray:
        """Return a read-only ``(H, W, 4)`` view over the samples."""

        return self.data.reshape((self.height, self.width, 4))

    def rgb_at(self, x: int, y: int) -> tuple[int, int, int]:
        offset = (y * self.width + x) * 4
        return (
            int(self.data[offset]),
            int(self.data[offset + 1]),
            int(self.data[offset + 2]),
        )

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.width, self.height, self.data.copy())

    def crop(self, bounds: Bounds) -> PixelBuffer:
        """Return the pixels inside *bounds* as a new buffer."""

        x0 = max(0, min(self.width, bounds.x))
        y0 = max(0, min(self.height, bounds.y))
        x1 = max(x0, min(self.width, bounds.x + bounds.width))
        y1 = max(y0, min(self.height, bounds.y + bounds.height))
        region = self.pixels()[y0:y1, x0:x1]
        return PixelBuffer(x1 - x0, y1 - y0, np.array(region))

    def same_pixels(self, other: PixelBuffer) -> bool:
        """Return ``True`` when *other* has identical dimensions and bytes."""

        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.data, other.data)
        )


__all__ = ["PixelBuffer"]
