"""iEdit: magic wand selection and colour pipeline for raster image editing."""

from __future__ import annotations

from .core import (
    Bounds,
    EffectNode,
    EffectStack,
    FilterPipeline,
    FilterState,
    MagicWandSettings,
    PixelBuffer,
    Preset,
    PresetCatalog,
    RenderPass,
    SelectionEngine,
    SelectionMask,
    apply_filters,
    build_render_passes,
    generate_presets,
    select_region,
)
from .errors import EmptySelectionError, IEditError, InvalidDimensionsError, InvalidSeedError
from .session import EditSession

__version__ = "0.1.0"

__all__ = [
    "Bounds",
    "EditSession",
    "EffectNode",
    "EffectStack",
    "EmptySelectionError",
    "FilterPipeline",
    "FilterState",
    "IEditError",
    "InvalidDimensionsError",
    "InvalidSeedError",
    "MagicWandSettings",
    "PixelBuffer",
    "Preset",
    "PresetCatalog",
    "RenderPass",
    "SelectionEngine",
    "SelectionMask",
    "apply_filters",
    "build_render_passes",
    "generate_presets",
    "select_region",
]
