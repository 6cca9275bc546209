"""Deterministic preset generation from category blueprints."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from ..config import PRESETS_PER_CATEGORY
from .effect_stack import EffectNode

ANIMATED_PRIMITIVES = frozenset({"glitch", "scanlines"})


@dataclass(frozen=True)
class CategoryBlueprint:
    """A preset family: display name plus the ordered effect primitives."""

    category: str
    primitives: tuple[str, ...]


CATEGORY_BLUEPRINTS: tuple[CategoryBlueprint, ...] = (
    CategoryBlueprint("Cinematic", ("contrast", "temperature", "teal_orange", "vignette", "grain")),
    CategoryBlueprint("Portrait", ("brightness", "contrast", "saturation", "bloom")),
    CategoryBlueprint("Landscape", ("exposure", "saturation", "vignette", "film_curve")),
    CategoryBlueprint("Vintage", ("film_curve", "grain", "vignette", "temperature")),
    CategoryBlueprint("Retro CRT", ("scanlines", "chromatic_aberration", "glitch", "vignette")),
    CategoryBlueprint("Dramatic", ("contrast", "gamma", "bloom", "teal_orange")),
    CategoryBlueprint("Experimental", ("glitch", "hue_rotate", "chromatic_aberration", "grain")),
    CategoryBlueprint("Black & White", ("contrast", "film_curve", "grain")),
    CategoryBlueprint("HDR", ("exposure", "contrast", "bloom")),
    CategoryBlueprint("Artistic", ("hue_rotate", "saturation", "vignette")),
)


@dataclass(frozen=True)
class Preset:
    """A named effect stack plus the filter deltas applied alongside it."""

    id: str
    name: str
    category: str
    intensity: float
    stack: tuple[EffectNode, ...]
    controls: Mapping[str, float] = field(default_factory=dict)


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


def _build_stack(preset_id: str, primitives: Sequence[str], intensity: float) -> tuple[EffectNode, ...]:
    # Weight drops by 0.03 per position in the stack.
    return tuple(
        EffectNode(
            id=f"{preset_id}_{index}_{primitive}",
            primitive=primitive,
            enabled=True,
            blend_mode="normal" if index % 2 == 0 else "screen",
            uniforms={"amount": round(0.15 + intensity * (0.8 - index * 0.03), 3)},
            animated=primitive in ANIMATED_PRIMITIVES,
        )
        for index, primitive in enumerate(primitives)
    )


def _build_controls(intensity: float) -> dict[str, float]:
    return {
        "brightness": round(intensity * 0.2 - 0.05, 3),
        "contrast": round(intensity * 0.45, 3),
        "temperature": round(intensity * 0.3 - 0.15, 3),
        "duotone": round(intensity * 0.35, 3),
        "bloom": round(intensity * 0.4, 3),
        "glitch": round((intensity - 0.7) * 0.6 if intensity > 0.7 else 0.0, 3),
    }


def generate_presets(
    count_per_category: int = PRESETS_PER_CATEGORY,
    blueprints: Sequence[CategoryBlueprint] = CATEGORY_BLUEPRINTS,
) -> list[Preset]:
    """Return ``count_per_category`` presets per blueprint.

    Intensity ramps linearly from ``1/count`` to ``1``.  The output is a pure
    function of the arguments, ids included, so two calls compare equal.
    """

    presets: list[Preset] = []
    if count_per_category <= 0:
        return presets

    for blueprint in blueprints:
        slug = _slug(blueprint.category)
        for step in range(1, count_per_category + 1):
            intensity = step / count_per_category
            preset_id = f"preset_{slug}_{step}"
            presets.append(
                Preset(
                    id=preset_id,
                    name=f"{blueprint.category} {step}",
                    category=blueprint.category,
                    intensity=intensity,
                    stack=_build_stack(preset_id, blueprint.primitives, intensity),
                    controls=_build_controls(intensity),
                )
            )
    return presets


class PresetCatalog:
    """Lazily generated, indexed collection of presets."""

    def __init__(
        self,
        count_per_category: int = PRESETS_PER_CATEGORY,
        blueprints: Sequence[CategoryBlueprint] = CATEGORY_BLUEPRINTS,
    ) -> None:
        self._count = count_per_category
        self._blueprints = tuple(blueprints)
        self._presets: list[Preset] | None = None
        self._by_id: dict[str, Preset] = {}

    def generate(self, count_per_category: int | None = None) -> list[Preset]:
        """Return a fresh preset list; see :func:`generate_presets`."""

        count = self._count if count_per_category is None else count_per_category
        return generate_presets(count, self._blueprints)

    def _ensure_loaded(self) -> list[Preset]:
        if self._presets is None:
            self._presets = self.generate()
            self._by_id = {preset.id: preset for preset in self._presets}
        return self._presets

    @property
    def presets(self) -> list[Preset]:
        return self._ensure_loaded()

    @property
    def categories(self) -> list[str]:
        return [blueprint.category for blueprint in self._blueprints]

    def find(self, preset_id: str) -> Preset | None:
        self._ensure_loaded()
        return self._by_id.get(preset_id)

    def by_category(self, category: str) -> list[Preset]:
        return [preset for preset in self.presets if preset.category == category]


__all__ = [
    "CATEGORY_BLUEPRINTS",
    "CategoryBlueprint",
    "Preset",
    "PresetCatalog",
    "generate_presets",
]
