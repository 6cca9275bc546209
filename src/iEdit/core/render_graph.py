"""Ping-pong render-pass scheduling for an effect stack.

The schedule describes how a compositor (CPU or GPU) should run the enabled
effects in order while alternating between two intermediate buffers.  The
engine only produces the schedule; executing it is up to the consumer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, Literal

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .effect_stack import EffectNode

PassInput = Literal["source", "bufferA", "bufferB"]
PassOutput = Literal["bufferA", "bufferB", "screen"]

SOURCE: PassInput = "source"
BUFFER_A: PassOutput = "bufferA"
BUFFER_B: PassOutput = "bufferB"
SCREEN: PassOutput = "screen"


@dataclass(frozen=True)
class RenderPass:
    """One compositing step: read ``input``, run ``node``, write ``output``."""

    id: str
    input: PassInput
    output: PassOutput
    node: EffectNode


def build_render_passes(nodes: Iterable[EffectNode]) -> list[RenderPass]:
    """Return the pass schedule for the enabled subset of *nodes*.

    The first pass reads the source image and writes ``bufferA``; each later
    pass reads its predecessor's output and writes the other buffer.  The last
    pass always targets ``screen``.  No enabled node means no passes.
    """

    passes: list[RenderPass] = []
    source: PassInput = SOURCE
    target: PassOutput = BUFFER_A
    for node in nodes:
        if not node.enabled:
            continue
        passes.append(RenderPass(id=f"{node.id}_pass", input=source, output=target, node=node))
        source = target  # type: ignore[assignment]
        target = BUFFER_B if target == BUFFER_A else BUFFER_A

    if passes:
        passes[-1] = replace(passes[-1], output=SCREEN)
    return passes


__all__ = [
    "BUFFER_A",
    "BUFFER_B",
    "PassInput",
    "PassOutput",
    "RenderPass",
    "SCREEN",
    "SOURCE",
    "build_render_passes",
]
