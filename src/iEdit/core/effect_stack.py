"""Ordered, toggle-able effect nodes and their aggregate uniform map."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Literal, Mapping

from .render_graph import RenderPass, build_render_passes

_LOGGER = logging.getLogger(__name__)

BlendMode = Literal["normal", "screen", "multiply", "overlay"]

BLEND_MODES = ("normal", "screen", "multiply", "overlay")

EFFECT_PRIMITIVES = (
    "brightness",
    "contrast",
    "exposure",
    "saturation",
    "temperature",
    "tint",
    "gamma",
    "teal_orange",
    "film_curve",
    "hue_rotate",
    "duotone",
    "bloom",
    "vignette",
    "grain",
    "scanlines",
    "chromatic_aberration",
    "glitch",
)
"""Primitive identifiers understood by the CPU pipeline or a GPU compositor."""


@dataclass(frozen=True)
class EffectNode:
    """One effect in the stack.

    ``uniforms`` maps uniform names to floats.  Nodes are immutable; the
    helpers below return updated copies with freshly copied uniform dicts so
    two stacks never share a mutable mapping.
    """

    id: str
    primitive: str
    enabled: bool = True
    blend_mode: BlendMode = "normal"
    uniforms: Mapping[str, float] = field(default_factory=dict)
    animated: bool = False

    def __post_init__(self) -> None:
        if self.blend_mode not in BLEND_MODES:
            raise ValueError(f"blend_mode must be one of {BLEND_MODES}, got {self.blend_mode!r}")
        object.__setattr__(
            self, "uniforms", {str(key): float(value) for key, value in self.uniforms.items()}
        )

    def toggled(self) -> EffectNode:
        return replace(self, enabled=not self.enabled)

    def with_uniform(self, key: str, value: float) -> EffectNode:
        uniforms = dict(self.uniforms)
        uniforms[key] = float(value)
        return replace(self, uniforms=uniforms)


class EffectStack:
    """Ordered sequence of :class:`EffectNode` values.

    Order is the compositing order and survives toggles, uniform edits and
    removals.  Every mutator returns the resulting tuple; calls referring to
    unknown ids or out-of-range indices leave the stack untouched, which keeps
    rapid UI-driven edits with stale references harmless.
    """

    def __init__(self, nodes: Iterable[EffectNode] = ()) -> None:
        self._nodes: tuple[EffectNode, ...] = tuple(nodes)
        self._next_serial = 1

    @property
    def nodes(self) -> tuple[EffectNode, ...]:
        return self._nodes

    def __iter__(self) -> Iterator[EffectNode]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: str) -> EffectNode | None:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def set_stack(self, nodes: Iterable[EffectNode]) -> tuple[EffectNode, ...]:
        self._nodes = tuple(nodes)
        return self._nodes

    def _allocate_id(self, primitive: str) -> str:
        taken = {node.id for node in self._nodes}
        while True:
            candidate = f"{primitive}_{self._next_serial}"
            self._next_serial += 1
            if candidate not in taken:
                return candidate

    def add_node(
        self,
        primitive: str,
        *,
        enabled: bool = True,
        blend_mode: BlendMode = "normal",
        uniforms: Mapping[str, float] | None = None,
        animated: bool = False,
    ) -> tuple[EffectNode, ...]:
        """Append a node for *primitive* with a freshly allocated id."""

        node = EffectNode(
            id=self._allocate_id(primitive),
            primitive=primitive,
            enabled=enabled,
            blend_mode=blend_mode,
            uniforms=dict(uniforms or {}),
            animated=animated,
        )
        self._nodes = self._nodes + (node,)
        _LOGGER.debug("Added effect node %s", node.id)
        return self._nodes

    def _map_node(self, node_id: str, transform) -> tuple[EffectNode, ...]:
        if self.get(node_id) is None:
            return self._nodes
        self._nodes = tuple(transform(node) if node.id == node_id else node for node in self._nodes)
        return self._nodes

    def toggle_node(self, node_id: str) -> tuple[EffectNode, ...]:
        return self._map_node(node_id, EffectNode.toggled)

    def update_uniform(self, node_id: str, key: str, value: float) -> tuple[EffectNode, ...]:
        return self._map_node(node_id, lambda node: node.with_uniform(key, value))

    def remove_node(self, node_id: str) -> tuple[EffectNode, ...]:
        self._nodes = tuple(node for node in self._nodes if node.id != node_id)
        return self._nodes

    def reorder(self, from_index: int, to_index: int) -> tuple[EffectNode, ...]:
        """Move the node at *from_index* so it ends up at *to_index*."""

        count = len(self._nodes)
        if not (0 <= from_index < count and 0 <= to_index < count):
            return self._nodes
        nodes = list(self._nodes)
        item = nodes.pop(from_index)
        nodes.insert(to_index, item)
        self._nodes = tuple(nodes)
        return self._nodes

    def to_uniform_map(self) -> dict[str, float]:
        """Flatten enabled nodes into ``"<primitive>.<uniform>"`` keys.

        When two enabled nodes share a primitive, the later one wins.
        """

        uniforms: dict[str, float] = {}
        for node in self._nodes:
            if not node.enabled:
                continue
            for key, value in node.uniforms.items():
                uniforms[f"{node.primitive}.{key}"] = value
        return uniforms

    def render_passes(self) -> list[RenderPass]:
        """Return the ping-pong schedule for the enabled nodes."""

        return build_render_passes(self._nodes)


__all__ = [
    "BLEND_MODES",
    "BlendMode",
    "EFFECT_PRIMITIVES",
    "EffectNode",
    "EffectStack",
]
