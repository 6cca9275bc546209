"""Preview backends for the edit pipeline."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from .buffer import PixelBuffer
from .filters import FilterState, apply_filters
from .mask import SelectionMask
from .render_graph import RenderPass

_LOGGER = logging.getLogger(__name__)


class PreviewSession(ABC):
    """Represents a backend specific rendering context.

    Sub-classes encapsulate any state that needs to live between individual
    preview renders.  For the CPU backend this simply wraps the pristine source
    buffer, while a GPU variant would retain textures and the ping-pong
    framebuffers named by the render-pass schedule.
    """

    @abstractmethod
    def dispose(self) -> None:
        """Release resources associated with the session."""


class PreviewBackend(ABC):
    """Abstract preview backend selecting the optimal rendering strategy."""

    tier_name: str = "unknown"
    """Human readable tier label (e.g. ``"GPU"`` or ``"CPU"``)."""

    supports_realtime: bool = False
    """Whether the backend can render fast enough to run on the UI thread."""

    @abstractmethod
    def create_session(self, source: PixelBuffer) -> PreviewSession:
        """Create a rendering session for *source*.

        The editing session keeps the returned object alive for as long as the
        image stays open so every render starts from the same pristine pixels.
        """

    @abstractmethod
    def render(
        self,
        session: PreviewSession,
        state: FilterState,
        mask: SelectionMask | None = None,
        passes: Sequence[RenderPass] = (),
    ) -> PixelBuffer:
        """Apply *state* (and, where supported, *passes*) and return the frame."""

    def dispose_session(self, session: PreviewSession) -> None:
        """Release resources owned by *session*."""

        session.dispose()


@dataclass
class _CpuPreviewSession(PreviewSession):
    """Store the source buffer for the CPU backend."""

    source: PixelBuffer

    def dispose(self) -> None:  # pragma: no cover - nothing to free
        return


class _CpuPreviewBackend(PreviewBackend):
    """CPU implementation running the filter pipeline on the source buffer.

    Render passes are accepted for interface parity; their filter-relevant
    uniforms already arrive merged into *state*, and the remaining GPU-only
    primitives are skipped.
    """

    tier_name = "CPU"
    supports_realtime = False

    def create_session(self, source: PixelBuffer) -> PreviewSession:
        return _CpuPreviewSession(source)

    def render(
        self,
        session: PreviewSession,
        state: FilterState,
        mask: SelectionMask | None = None,
        passes: Sequence[RenderPass] = (),
    ) -> PixelBuffer:
        assert isinstance(session, _CpuPreviewSession)
        if passes:
            _LOGGER.debug("CPU backend ignoring %d compositor passes", len(passes))
        return apply_filters(session.source, state, mask)


def select_preview_backend() -> PreviewBackend:
    """Return the preview backend used for edit previews.

    Only the CPU tier ships; a GPU compositor would consume the schedule from
    :func:`iEdit.core.render_graph.build_render_passes` instead.
    """

    backend = _CpuPreviewBackend()
    _LOGGER.info("Using %s preview backend", backend.tier_name)
    return backend


__all__ = [
    "PreviewBackend",
    "PreviewSession",
    "select_preview_backend",
]
