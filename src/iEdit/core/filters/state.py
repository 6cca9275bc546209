"""Filter state values and the rules for merging effect uniforms into them."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, MutableMapping

from ...config import BLOOM_MIN_STRENGTH, DUOTONE_DARK, DUOTONE_LIGHT, GLITCH_MIN_STRENGTH

FILTER_KEYS = (
    "brightness",
    "contrast",
    "temperature",
    "tint",
    "duotone",
    "glitch",
    "bloom",
)
"""Scalar adjustments in the order the pipeline applies them."""

FILTER_RANGES: Mapping[str, tuple[float, float]] = {
    "brightness": (-1.0, 1.0),
    "contrast": (-1.0, 1.0),
    "temperature": (-1.0, 1.0),
    "tint": (-1.0, 1.0),
    "duotone": (0.0, 1.0),
    "glitch": (0.0, 1.0),
    "bloom": (0.0, 1.0),
}
"""Inclusive ranges for each adjustment slider."""

AMOUNT_UNIFORM = "amount"


def _clamp(value: float, minimum: float, maximum: float) -> float:
    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


def _tone(value: Any) -> tuple[float, float, float]:
    r, g, b = value
    return (
        _clamp(float(r), 0.0, 255.0),
        _clamp(float(g), 0.0, 255.0),
        _clamp(float(b), 0.0, 255.0),
    )


@dataclass(frozen=True)
class FilterState:
    """Named scalar colour adjustments applied by the filter pipeline."""

    brightness: float = 0.0
    contrast: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0
    duotone: float = 0.0
    glitch: float = 0.0
    bloom: float = 0.0
    duotone_dark: tuple[float, float, float] = DUOTONE_DARK
    duotone_light: tuple[float, float, float] = DUOTONE_LIGHT

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> FilterState:
        """Build a clamped state from *values*, ignoring unknown keys."""

        if values is None:
            return cls()
        if isinstance(values, cls):
            return values.clamp()
        kwargs: dict[str, Any] = {
            key: float(values[key]) for key in FILTER_KEYS if key in values
        }
        for key in ("duotone_dark", "duotone_light"):
            if key in values:
                kwargs[key] = _tone(values[key])
        return cls(**kwargs).clamp()

    def clamp(self) -> FilterState:
        """Return a copy with every adjustment inside :data:`FILTER_RANGES`."""

        changes: dict[str, Any] = {
            key: _clamp(float(getattr(self, key)), *FILTER_RANGES[key]) for key in FILTER_KEYS
        }
        changes["duotone_dark"] = _tone(self.duotone_dark)
        changes["duotone_light"] = _tone(self.duotone_light)
        return replace(self, **changes)

    def with_value(self, key: str, value: float) -> FilterState:
        if key not in FILTER_RANGES:
            raise KeyError(f"Unknown filter adjustment: {key!r}")
        return replace(self, **{key: _clamp(float(value), *FILTER_RANGES[key])})

    def with_deltas(self, deltas: Mapping[str, float]) -> FilterState:
        """Return a copy with *deltas* added to the matching adjustments."""

        changes = {
            key: _clamp(getattr(self, key) + float(value), *FILTER_RANGES[key])
            for key, value in deltas.items()
            if key in FILTER_RANGES
        }
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    @property
    def duotone_active(self) -> bool:
        return self.duotone > 0.0

    @property
    def glitch_active(self) -> bool:
        return self.glitch > GLITCH_MIN_STRENGTH

    @property
    def bloom_active(self) -> bool:
        return self.bloom > BLOOM_MIN_STRENGTH

    @property
    def is_identity(self) -> bool:
        """``True`` when applying the state leaves every pixel unchanged."""

        return (
            self.brightness == 0.0
            and self.contrast == 0.0
            and self.temperature == 0.0
            and self.tint == 0.0
            and not self.duotone_active
            and not self.glitch_active
            and not self.bloom_active
        )


def resolve_filter_state(
    base: FilterState,
    uniforms: Mapping[str, float] | None,
    *,
    mode: str = "delta",
) -> FilterState:
    """Merge an effect-stack uniform map into *base*.

    ``uniforms`` uses the ``"<primitive>.<uniform>"`` keys produced by
    :meth:`EffectStack.to_uniform_map`.  Only the ``amount`` uniform of
    primitives that name a filter adjustment is consumed; GPU-only primitives
    such as ``vignette`` or ``grain`` pass through untouched for a compositor
    to pick up.

    ``mode="delta"`` adds the amounts to *base*, ``"absolute"`` replaces the
    matching adjustments.  Any other value raises :class:`ValueError`.
    """

    if mode not in ("delta", "absolute"):
        raise ValueError("mode must be 'delta' or 'absolute'")

    resolved: MutableMapping[str, float] = {key: getattr(base, key) for key in FILTER_KEYS}
    for name, value in (uniforms or {}).items():
        primitive, _, uniform = name.partition(".")
        if uniform != AMOUNT_UNIFORM or primitive not in FILTER_RANGES:
            continue
        if mode == "delta":
            resolved[primitive] = resolved[primitive] + float(value)
        else:
            resolved[primitive] = float(value)

    return replace(
        base,
        **{key: _clamp(value, *FILTER_RANGES[key]) for key, value in resolved.items()},
    )


__all__ = [
    "AMOUNT_UNIFORM",
    "FILTER_KEYS",
    "FILTER_RANGES",
    "FilterState",
    "resolve_filter_state",
]
