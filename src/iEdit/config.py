"""Tuning constants for the selection and colour pipeline."""

from __future__ import annotations

# Flood fill.  The RGB and Lab scales are empirical: Lab's perceptual range is
# much narrower than raw RGB distances so the same slider position maps to a
# smaller tolerance.
RGB_THRESHOLD_SCALE = 255.0
LAB_THRESHOLD_SCALE = 45.0

GRADIENT_THRESHOLD_BASE = 18.0
GRADIENT_THRESHOLD_SCALE = 60.0

FEATHER_CUTOFF = 110.0
"""Box-average value (out of 255) a feathered pixel must exceed to stay set."""

MASK_ON = 255
MASK_OFF = 0

# Filter pipeline.
BRIGHTNESS_SCALE = 255.0
CONTRAST_PIVOT = 128.0
TEMPERATURE_SCALE = 40.0
TINT_SCALE = 25.0
GLITCH_RED_SCALE = 70.0
GLITCH_BLUE_SCALE = 60.0
GLITCH_PERIOD = 7
GLITCH_MIN_STRENGTH = 0.01
BLOOM_SCALE = 35.0
BLOOM_MIN_STRENGTH = 0.01

DUOTONE_DARK = (20.0, 40.0, 60.0)
DUOTONE_LIGHT = (60.0, 180.0, 255.0)

LUMA_WEIGHTS = (0.299, 0.587, 0.114)

# Editing session.
HISTORY_MAX_DEPTH = 100
PRESETS_PER_CATEGORY = 100

DEFAULT_WAND_SETTINGS = {
    "sensitivity": 0.125,
    "feather_radius": 0.0,
    "edge_smoothness": 0.35,
    "color_metric": "rgb",
    "gradient_aware": True,
    "mode": "replace",
}
"""Keyword arguments for the :class:`MagicWandSettings` the session starts with."""
