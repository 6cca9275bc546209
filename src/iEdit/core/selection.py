"""Magic wand region growing.

The flood fill runs as a single Numba kernel over the flat RGBA buffer.  A
visited bitmap bounds the traversal to one evaluation per pixel, and pixels are
marked when enqueued so the preallocated queue never needs more than
``width * height`` slots.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, replace
from typing import Literal

import numpy as np
from numba import jit

from ..config import (
    GRADIENT_THRESHOLD_BASE,
    GRADIENT_THRESHOLD_SCALE,
    LAB_THRESHOLD_SCALE,
    MASK_OFF,
    MASK_ON,
    RGB_THRESHOLD_SCALE,
)
from ..errors import InvalidDimensionsError, InvalidSeedError
from .buffer import PixelBuffer
from .color_metric import _lab_distance, _rgb_distance, _rgb_to_lab
from .mask import SelectionMask, feather_mask

_LOGGER = logging.getLogger(__name__)

ColorMetricName = Literal["rgb", "lab"]
SelectionModeName = Literal["replace", "add", "subtract"]

COLOR_METRICS = ("rgb", "lab")
SELECTION_MODES = ("replace", "add", "subtract")


def _clamp(value: float, minimum: float, maximum: float) -> float:
    """Return *value* constrained to ``[minimum, maximum]``."""

    return max(minimum, min(maximum, float(value)))


@dataclass(frozen=True)
class MagicWandSettings:
    """Snapshot of the magic wand controls.

    ``sensitivity`` and ``edge_smoothness`` live in ``[0, 1]``;
    ``feather_radius`` is measured in pixels.  ``mode`` records how the editing
    session combines a new selection with the current one: ``"add"`` and
    ``"subtract"`` chain onto the previous mask, ``"replace"`` starts over.
    """

    sensitivity: float = 0.125
    feather_radius: float = 0.0
    edge_smoothness: float = 0.35
    color_metric: ColorMetricName = "rgb"
    gradient_aware: bool = False
    mode: SelectionModeName = "replace"

    def __post_init__(self) -> None:
        if self.color_metric not in COLOR_METRICS:
            raise ValueError(f"color_metric must be one of {COLOR_METRICS}, got {self.color_metric!r}")
        if self.mode not in SELECTION_MODES:
            raise ValueError(f"mode must be one of {SELECTION_MODES}, got {self.mode!r}")

    def clamp(self) -> MagicWandSettings:
        """Return a copy with every numeric control inside its slider range."""

        return replace(
            self,
            sensitivity=_clamp(self.sensitivity, 0.0, 1.0),
            feather_radius=max(0.0, float(self.feather_radius)),
            edge_smoothness=_clamp(self.edge_smoothness, 0.0, 1.0),
            gradient_aware=bool(self.gradient_aware),
        )

    def replace(self, **changes: object) -> MagicWandSettings:
        return replace(self, **changes)

    @property
    def threshold(self) -> float:
        """Colour distance above which a pixel is rejected."""

        scale = LAB_THRESHOLD_SCALE if self.color_metric == "lab" else RGB_THRESHOLD_SCALE
        return self.sensitivity * scale

    @property
    def gradient_threshold(self) -> float:
        """Local gradient magnitude above which a pixel counts as an edge."""

        return GRADIENT_THRESHOLD_BASE + self.edge_smoothness * GRADIENT_THRESHOLD_SCALE

    @property
    def feather_pixels(self) -> int:
        """Feather radius rounded half-up to whole pixels."""

        return int(math.floor(self.feather_radius + 0.5))


@jit(nopython=True, cache=True)
def _local_gradient(data: np.ndarray, width: int, height: int, x: int, y: int) -> float:
    """Mean RGB distance to the right and lower neighbours (edge-clamped)."""

    sx = min(width - 1, x + 1)
    sy = min(height - 1, y + 1)
    c = (y * width + x) * 4
    rx = (y * width + sx) * 4
    by = (sy * width + x) * 4

    dx = _rgb_distance(
        float(data[c]), float(data[c + 1]), float(data[c + 2]),
        float(data[rx]), float(data[rx + 1]), float(data[rx + 2]),
    )
    dy = _rgb_distance(
        float(data[c]), float(data[c + 1]), float(data[c + 2]),
        float(data[by]), float(data[by + 1]), float(data[by + 2]),
    )
    return (dx + dy) / 2.0


@jit(nopython=True, cache=True)
def _flood_fill(
    data: np.ndarray,
    width: int,
    height: int,
    seed_x: int,
    seed_y: int,
    use_lab: bool,
    threshold: float,
    gradient_aware: bool,
    gradient_threshold: float,
    fill_value: int,
    mask: np.ndarray,
) -> int:
    """Grow a 4-connected region from the seed, writing *fill_value* into *mask*.

    Returns the number of accepted pixels.
    """

    total = width * height
    visited = np.zeros(total, dtype=np.uint8)
    queue = np.empty(total, dtype=np.int64)

    seed_offset = (seed_y * width + seed_x) * 4
    seed_r = float(data[seed_offset])
    seed_g = float(data[seed_offset + 1])
    seed_b = float(data[seed_offset + 2])
    seed_l, seed_a, seed_lab_b = _rgb_to_lab(seed_r, seed_g, seed_b)

    head = 0
    tail = 0
    start = seed_y * width + seed_x
    visited[start] = 1
    queue[tail] = start
    tail += 1
    accepted = 0

    while head < tail:
        index = queue[head]
        head += 1
        x = index % width
        y = index // width

        p = index * 4
        r = float(data[p])
        g = float(data[p + 1])
        b = float(data[p + 2])

        if use_lab:
            lab_l, lab_a, lab_b = _rgb_to_lab(r, g, b)
            distance = _lab_distance(seed_l, seed_a, seed_lab_b, lab_l, lab_a, lab_b)
        else:
            distance = _rgb_distance(seed_r, seed_g, seed_b, r, g, b)
        if distance > threshold:
            continue

        if gradient_aware and _local_gradient(data, width, height, x, y) > gradient_threshold:
            continue

        mask[index] = fill_value
        accepted += 1

        if x + 1 < width and visited[index + 1] == 0:
            visited[index + 1] = 1
            queue[tail] = index + 1
            tail += 1
        if x > 0 and visited[index - 1] == 0:
            visited[index - 1] = 1
            queue[tail] = index - 1
            tail += 1
        if y + 1 < height and visited[index + width] == 0:
            visited[index + width] = 1
            queue[tail] = index + width
            tail += 1
        if y > 0 and visited[index - width] == 0:
            visited[index - width] = 1
            queue[tail] = index - width
            tail += 1

    return accepted


def select_region(
    buffer: PixelBuffer,
    seed_x: int,
    seed_y: int,
    settings: MagicWandSettings,
    previous_mask: SelectionMask | None = None,
    subtract: bool | None = None,
) -> SelectionMask:
    """Return the mask grown from ``(seed_x, seed_y)`` under *settings*.

    Parameters
    ----------
    buffer:
        Source pixels.  Never modified.
    seed_x, seed_y:
        Seed coordinates; outside the buffer raises :class:`InvalidSeedError`.
    settings:
        Wand snapshot used for this call only.
    previous_mask:
        Optional mask the result starts from, enabling additive and
        subtractive chaining.  It must match the buffer size.
    subtract:
        Write ``0`` instead of ``255`` for accepted pixels.  ``None`` derives
        the flag from ``settings.mode``.
    """

    width = buffer.width
    height = buffer.height
    if not (0 <= seed_x < width and 0 <= seed_y < height):
        raise InvalidSeedError(seed_x, seed_y, width, height)

    if previous_mask is not None and not previous_mask.matches(width, height):
        raise InvalidDimensionsError(
            f"Previous mask is {previous_mask.width}x{previous_mask.height} "
            f"but buffer is {width}x{height}"
        )

    snapshot = settings.clamp()
    if subtract is None:
        subtract = snapshot.mode == "subtract"

    if previous_mask is not None:
        output = np.array(previous_mask.pixels, dtype=np.uint8)
    else:
        output = np.zeros(width * height, dtype=np.uint8)

    started = time.perf_counter()
    accepted = _flood_fill(
        buffer.data,
        width,
        height,
        int(seed_x),
        int(seed_y),
        snapshot.color_metric == "lab",
        float(snapshot.threshold),
        bool(snapshot.gradient_aware),
        float(snapshot.gradient_threshold),
        MASK_OFF if subtract else MASK_ON,
        output,
    )

    radius = snapshot.feather_pixels
    if radius > 0:
        output = feather_mask(output, width, height, radius)

    mask = SelectionMask.from_pixels(width, height, output)
    _LOGGER.debug(
        "Magic wand at (%d, %d) accepted %d pixels (%s, threshold %.2f) in %.1f ms",
        seed_x,
        seed_y,
        accepted,
        snapshot.color_metric,
        snapshot.threshold,
        (time.perf_counter() - started) * 1000.0,
    )
    return mask


class SelectionEngine:
    """Hold the current wand settings and run selections with them.

    The engine keeps no image data between calls; every :meth:`select` passes
    the full settings snapshot to :func:`select_region`.
    """

    def __init__(self, settings: MagicWandSettings | None = None) -> None:
        self._settings = settings or MagicWandSettings()

    @property
    def settings(self) -> MagicWandSettings:
        return self._settings

    def update(self, **changes: object) -> MagicWandSettings:
        """Replace individual settings and return the new snapshot."""

        self._settings = self._settings.replace(**changes)
        return self._settings

    def select(
        self,
        buffer: PixelBuffer,
        seed_x: int,
        seed_y: int,
        previous_mask: SelectionMask | None = None,
        subtract: bool | None = None,
    ) -> SelectionMask:
        return select_region(buffer, seed_x, seed_y, self._settings, previous_mask, subtract)


__all__ = [
    "COLOR_METRICS",
    "MagicWandSettings",
    "SELECTION_MODES",
    "SelectionEngine",
    "select_region",
]
