"""JIT-accelerated filter executor using Numba.

This is the default execution path: a single compiled loop walks the flat RGBA
buffer, runs :func:`_apply_pixel` on every selected pixel and writes the result
into a freshly allocated output array.
"""

from __future__ import annotations

import numpy as np
from numba import jit

from .algorithms import _apply_pixel, _float_to_uint8
from .state import FilterState


def apply_filters_jit(data: np.ndarray, state: FilterState, mask: np.ndarray | None) -> np.ndarray:
    """Return a filtered copy of the flat RGBA array *data*.

    *mask* is a flat ``uint8`` bitmap with one entry per pixel, or ``None`` to
    process every pixel.
    """

    output = np.array(data, dtype=np.uint8)
    pixel_count = output.size // 4
    if pixel_count == 0:
        return output

    use_mask = mask is not None
    mask_array = mask if mask is not None else np.zeros(0, dtype=np.uint8)
    dark_r, dark_g, dark_b = state.duotone_dark
    light_r, light_g, light_b = state.duotone_light

    _apply_filters_fast(
        output,
        pixel_count,
        use_mask,
        mask_array,
        float(state.brightness),
        float(state.contrast),
        float(state.temperature),
        float(state.tint),
        float(state.duotone),
        float(dark_r),
        float(dark_g),
        float(dark_b),
        float(light_r),
        float(light_g),
        float(light_b),
        float(state.glitch),
        float(state.bloom),
    )
    return output


@jit(nopython=True, cache=True)
def _apply_filters_fast(
    buffer: np.ndarray,
    pixel_count: int,
    use_mask: bool,
    mask: np.ndarray,
    brightness: float,
    contrast: float,
    temperature: float,
    tint: float,
    duotone: float,
    dark_r: float,
    dark_g: float,
    dark_b: float,
    light_r: float,
    light_g: float,
    light_b: float,
    glitch: float,
    bloom: float,
) -> None:
    """JIT-compiled pixel processing kernel."""

    for pixel in range(pixel_count):
        if use_mask and mask[pixel] == 0:
            continue

        offset = pixel * 4
        r, g, b = _apply_pixel(
            float(buffer[offset]),
            float(buffer[offset + 1]),
            float(buffer[offset + 2]),
            pixel,
            brightness,
            contrast,
            temperature,
            tint,
            duotone,
            dark_r,
            dark_g,
            dark_b,
            light_r,
            light_g,
            light_b,
            glitch,
            bloom,
        )

        buffer[offset] = _float_to_uint8(r)
        buffer[offset + 1] = _float_to_uint8(g)
        buffer[offset + 2] = _float_to_uint8(b)
