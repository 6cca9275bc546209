"""Pillow-based filter executor using lookup tables (LUT).

Brightness, contrast, temperature, tint and bloom are independent per-channel
curves, so for states that do not use duotone or glitch the whole chain can be
baked into three 256-entry tables and applied with Pillow's C-optimised
``Image.point``.
"""

from __future__ import annotations

import numpy as np
from PIL import Image

from .algorithms import _apply_pixel, _float_to_uint8
from .state import FilterState


def lut_eligible(state: FilterState, mask: np.ndarray | None) -> bool:
    """Return ``True`` when *state* can be expressed as per-channel tables.

    Duotone mixes channels and glitch depends on the pixel position, so either
    one rules the LUT out.  Masked renders also go through the pixel kernels.
    """

    return mask is None and not state.duotone_active and not state.glitch_active


def build_channel_luts(state: FilterState) -> tuple[list[int], list[int], list[int]]:
    """Pre-compute the red, green and blue curves for every 8-bit value."""

    dark_r, dark_g, dark_b = state.duotone_dark
    light_r, light_g, light_b = state.duotone_light
    lut_r: list[int] = []
    lut_g: list[int] = []
    lut_b: list[int] = []
    for channel_value in range(256):
        value = float(channel_value)
        # Pixel index 1 never hits the glitch period; the state is glitch-free
        # anyway when this executor runs.
        r, g, b = _apply_pixel(
            value,
            value,
            value,
            1,
            float(state.brightness),
            float(state.contrast),
            float(state.temperature),
            float(state.tint),
            0.0,
            float(dark_r),
            float(dark_g),
            float(dark_b),
            float(light_r),
            float(light_g),
            float(light_b),
            0.0,
            float(state.bloom),
        )
        lut_r.append(_float_to_uint8(r))
        lut_g.append(_float_to_uint8(g))
        lut_b.append(_float_to_uint8(b))
    return lut_r, lut_g, lut_b


def apply_filters_with_lut(data: np.ndarray, width: int, height: int, state: FilterState) -> np.ndarray:
    """Return a filtered copy of the flat RGBA array *data* via ``Image.point``."""

    if width <= 0 or height <= 0:
        return np.array(data, dtype=np.uint8)

    lut_r, lut_g, lut_b = build_channel_luts(state)
    # Identity table keeps the alpha channel untouched.
    alpha_table = list(range(256))
    table = lut_r + lut_g + lut_b + alpha_table

    surface = np.asarray(data, dtype=np.uint8).reshape((height, width, 4))
    image = Image.frombuffer("RGBA", (width, height), surface.tobytes(), "raw", "RGBA", 0, 1)
    adjusted = image.point(table)
    return np.asarray(adjusted, dtype=np.uint8).reshape(-1).copy()
