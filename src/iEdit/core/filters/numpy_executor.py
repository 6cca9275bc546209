"""NumPy vectorised filter executor.

Mirrors the JIT kernel stage for stage using whole-array operations.  It needs
no compilation step, which makes it the fallback when Numba cannot build the
kernel, and it is convenient for processing row ranges independently because
every pixel's result depends only on its own samples and flat index.
"""

from __future__ import annotations

import numpy as np

from ...config import (
    BLOOM_SCALE,
    BRIGHTNESS_SCALE,
    CONTRAST_PIVOT,
    GLITCH_BLUE_SCALE,
    GLITCH_PERIOD,
    GLITCH_RED_SCALE,
    LUMA_WEIGHTS,
    TEMPERATURE_SCALE,
    TINT_SCALE,
)
from .state import FilterState


def _np_mix(dark: float, light: float, t: np.ndarray) -> np.ndarray:
    """Vectorised linear interpolation between two scalar tones."""

    return t * light + (1.0 - t) * dark


def apply_filters_vectorized(
    data: np.ndarray,
    state: FilterState,
    mask: np.ndarray | None,
    *,
    start_pixel: int = 0,
) -> np.ndarray:
    """Return a filtered copy of the flat RGBA array *data*.

    ``start_pixel`` is the flat index of the first pixel in *data*; it keeps
    the periodic glitch pattern aligned when a caller processes a slice of a
    larger frame.
    """

    output = np.array(data, dtype=np.uint8)
    pixels = output.reshape((-1, 4))
    if pixels.shape[0] == 0:
        return output

    rgb = pixels[:, :3].astype(np.float64)
    r = rgb[:, 0]
    g = rgb[:, 1]
    b = rgb[:, 2]

    brightness_term = state.brightness * BRIGHTNESS_SCALE
    contrast_factor = 1.0 + state.contrast
    r = (r + brightness_term - CONTRAST_PIVOT) * contrast_factor + CONTRAST_PIVOT
    g = (g + brightness_term - CONTRAST_PIVOT) * contrast_factor + CONTRAST_PIVOT
    b = (b + brightness_term - CONTRAST_PIVOT) * contrast_factor + CONTRAST_PIVOT

    r = r + state.temperature * TEMPERATURE_SCALE
    b = b - state.temperature * TEMPERATURE_SCALE
    g = g + state.tint * TINT_SCALE

    if state.duotone_active:
        luma_r, luma_g, luma_b = LUMA_WEIGHTS
        luma = (luma_r * r + luma_g * g + luma_b * b) / 255.0
        dark = state.duotone_dark
        light = state.duotone_light
        r = _np_mix(dark[0], light[0], luma)
        g = _np_mix(dark[1], light[1], luma)
        b = _np_mix(dark[2], light[2], luma)

    if state.glitch_active:
        indices = np.arange(start_pixel, start_pixel + pixels.shape[0])
        hit = indices % GLITCH_PERIOD == 0
        r = np.where(hit, np.minimum(255.0, r + state.glitch * GLITCH_RED_SCALE), r)
        b = np.where(hit, np.maximum(0.0, b - state.glitch * GLITCH_BLUE_SCALE), b)

    if state.bloom_active:
        boost = state.bloom * BLOOM_SCALE
        r = r + boost
        g = g + boost
        b = b + boost

    adjusted = np.rint(np.clip(np.stack((r, g, b), axis=1), 0.0, 255.0)).astype(np.uint8)
    if mask is None:
        pixels[:, :3] = adjusted
    else:
        selected = np.asarray(mask).reshape(-1) != 0
        pixels[selected, :3] = adjusted[selected]
    return output
