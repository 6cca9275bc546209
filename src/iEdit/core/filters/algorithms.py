"""Per-pixel colour maths shared by the JIT and LUT executors.

Every helper works on floating point channel values in the ``[0, 255]`` scale
and leaves clamping to :func:`_float_to_uint8`, so intermediate stages may run
outside the byte range.
"""

from __future__ import annotations

import numpy as np
from numba import jit

from ...config import (
    BLOOM_MIN_STRENGTH,
    BLOOM_SCALE,
    BRIGHTNESS_SCALE,
    CONTRAST_PIVOT,
    GLITCH_BLUE_SCALE,
    GLITCH_MIN_STRENGTH,
    GLITCH_PERIOD,
    GLITCH_RED_SCALE,
    LUMA_WEIGHTS,
    TEMPERATURE_SCALE,
    TINT_SCALE,
)

_LUMA_R, _LUMA_G, _LUMA_B = LUMA_WEIGHTS


@jit(nopython=True, inline="always")
def _tone_channel(value: float, brightness_term: float, contrast_factor: float) -> float:
    value = value + brightness_term
    return (value - CONTRAST_PIVOT) * contrast_factor + CONTRAST_PIVOT


@jit(nopython=True, cache=True)
def _apply_pixel(
    r: float,
    g: float,
    b: float,
    pixel: int,
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
) -> tuple[float, float, float]:
    """Run the fixed adjustment chain on one pixel and return unclamped RGB."""

    brightness_term = brightness * BRIGHTNESS_SCALE
    contrast_factor = 1.0 + contrast

    r = _tone_channel(r, brightness_term, contrast_factor)
    g = _tone_channel(g, brightness_term, contrast_factor)
    b = _tone_channel(b, brightness_term, contrast_factor)

    r = r + temperature * TEMPERATURE_SCALE
    b = b - temperature * TEMPERATURE_SCALE
    g = g + tint * TINT_SCALE

    if duotone > 0.0:
        luma = (_LUMA_R * r + _LUMA_G * g + _LUMA_B * b) / 255.0
        r = luma * light_r + (1.0 - luma) * dark_r
        g = luma * light_g + (1.0 - luma) * dark_g
        b = luma * light_b + (1.0 - luma) * dark_b

    if glitch > GLITCH_MIN_STRENGTH and pixel % GLITCH_PERIOD == 0:
        r = min(255.0, r + glitch * GLITCH_RED_SCALE)
        b = max(0.0, b - glitch * GLITCH_BLUE_SCALE)

    if bloom > BLOOM_MIN_STRENGTH:
        boost = bloom * BLOOM_SCALE
        r = r + boost
        g = g + boost
        b = b + boost

    return r, g, b


@jit(nopython=True, cache=True)
def _float_to_uint8(value: float) -> int:
    """Clamp *value* to ``[0, 255]`` and round half to even."""

    if value <= 0.0:
        return 0
    if value >= 255.0:
        return 255
    return int(np.rint(value))
