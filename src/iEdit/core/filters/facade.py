"""Public entry point of the filter pipeline.

Chooses an executor for each call:

* ``lut``   - Pillow lookup tables, only for per-channel states without a mask;
* ``jit``   - the Numba kernel, the default for everything else;
* ``numpy`` - the vectorised implementation, also used when the JIT path fails.

All executors produce the same bytes; the choice only affects speed.
"""

from __future__ import annotations

import logging
from typing import Mapping, Union

import numpy as np

from ...errors import InvalidDimensionsError
from ..buffer import PixelBuffer
from ..mask import SelectionMask
from .jit_executor import apply_filters_jit
from .numpy_executor import apply_filters_vectorized
from .pillow_executor import apply_filters_with_lut, lut_eligible
from .state import FilterState

_LOGGER = logging.getLogger(__name__)

EXECUTORS = ("auto", "jit", "numpy", "lut")

MaskLike = Union[SelectionMask, np.ndarray, None]


def _resolve_mask(mask: MaskLike, buffer: PixelBuffer) -> np.ndarray | None:
    if mask is None:
        return None
    if isinstance(mask, SelectionMask):
        if not mask.matches(buffer.width, buffer.height):
            raise InvalidDimensionsError(
                f"Mask is {mask.width}x{mask.height} but buffer is {buffer.width}x{buffer.height}"
            )
        return mask.pixels
    bitmap = np.asarray(mask, dtype=np.uint8).reshape(-1)
    if bitmap.size != buffer.size:
        raise InvalidDimensionsError(
            f"Mask has {bitmap.size} entries but buffer has {buffer.size} pixels"
        )
    return bitmap


def apply_filters(
    buffer: PixelBuffer,
    state: FilterState | Mapping[str, float],
    mask: MaskLike = None,
    *,
    executor: str = "auto",
) -> PixelBuffer:
    """Return a new buffer with *state* applied to *buffer*.

    Pixels whose *mask* entry is zero are copied through unchanged.  The
    input buffer is never modified.  Filters compound when re-applied, so
    callers should always filter the pristine source rather than a previous
    result.
    """

    if executor not in EXECUTORS:
        raise ValueError(f"executor must be one of {EXECUTORS}, got {executor!r}")

    resolved = state.clamp() if isinstance(state, FilterState) else FilterState.from_mapping(state)
    bitmap = _resolve_mask(mask, buffer)

    if resolved.is_identity or buffer.size == 0:
        return buffer.copy()

    if executor == "lut" and not lut_eligible(resolved, bitmap):
        raise ValueError("The LUT executor cannot apply duotone, glitch or masked renders")

    if executor == "lut" or (executor == "auto" and lut_eligible(resolved, bitmap)):
        data = apply_filters_with_lut(buffer.data, buffer.width, buffer.height, resolved)
    elif executor == "numpy":
        data = apply_filters_vectorized(buffer.data, resolved, bitmap)
    else:
        try:
            data = apply_filters_jit(buffer.data, resolved, bitmap)
        except Exception:
            if executor == "jit":
                raise
            _LOGGER.warning("JIT filter kernel failed; falling back to NumPy", exc_info=True)
            data = apply_filters_vectorized(buffer.data, resolved, bitmap)

    data.flags.writeable = False
    return PixelBuffer(buffer.width, buffer.height, data)


class FilterPipeline:
    """Apply :class:`FilterState` values to pixel buffers with a fixed executor."""

    def __init__(self, executor: str = "auto") -> None:
        if executor not in EXECUTORS:
            raise ValueError(f"executor must be one of {EXECUTORS}, got {executor!r}")
        self.executor = executor

    def apply(
        self,
        buffer: PixelBuffer,
        state: FilterState | Mapping[str, float],
        mask: MaskLike = None,
    ) -> PixelBuffer:
        return apply_filters(buffer, state, mask, executor=self.executor)
