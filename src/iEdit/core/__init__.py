"""Selection and colour pipeline engine."""

from __future__ import annotations

from .buffer import PixelBuffer
from .color_metric import lab_distance, rgb_distance, rgb_to_lab
from .effect_stack import EffectNode, EffectStack
from .filters import FilterPipeline, FilterState, apply_filters, resolve_filter_state
from .mask import Bounds, SelectionMask, crop_to_selection
from .presets import Preset, PresetCatalog, generate_presets
from .render_graph import RenderPass, build_render_passes
from .selection import MagicWandSettings, SelectionEngine, select_region

__all__ = [
    "Bounds",
    "EffectNode",
    "EffectStack",
    "FilterPipeline",
    "FilterState",
    "MagicWandSettings",
    "PixelBuffer",
    "Preset",
    "PresetCatalog",
    "RenderPass",
    "SelectionEngine",
    "SelectionMask",
    "apply_filters",
    "build_render_passes",
    "crop_to_selection",
    "generate_presets",
    "lab_distance",
    "resolve_filter_state",
    "rgb_distance",
    "rgb_to_lab",
    "select_region",
]
