"""Fixed-order colour adjustment pipeline.

This package provides the filter pipeline through a clean separation of
concerns:
- state: the :class:`FilterState` value and uniform merging rules
- algorithms: per-pixel maths shared by the compiled executors
- executors: JIT, NumPy and Pillow LUT implementations
- facade: executor selection and the public API
"""

from __future__ import annotations

from .facade import EXECUTORS, FilterPipeline, apply_filters
from .state import FILTER_KEYS, FILTER_RANGES, FilterState, resolve_filter_state

__all__ = [
    "EXECUTORS",
    "FILTER_KEYS",
    "FILTER_RANGES",
    "FilterPipeline",
    "FilterState",
    "apply_filters",
    "resolve_filter_state",
]
