"""Single-writer editing session tying selection, filters and effects together."""

from __future__ import annotations

from typing import Optional

from .config import DEFAULT_WAND_SETTINGS
from .core.buffer import PixelBuffer
from .core.effect_stack import EffectStack
from .core.filters import FilterState, resolve_filter_state
from .core.history import CallbackCommand, CommandHistory
from .core.mask import SelectionMask, crop_to_selection
from .core.presets import Preset
from .core.preview_backends import PreviewBackend, select_preview_backend
from .core.selection import MagicWandSettings, SelectionEngine
from .utils.logging import logger


class EditSession:
    """Own the state of one open image and sequence edits on it.

    The session holds the pristine source buffer, the current selection, the
    base :class:`FilterState` and the :class:`EffectStack`.  :meth:`render`
    always filters the source, never a previous render, so adjustments do not
    compound.  Selection, filter and preset edits go through a
    :class:`CommandHistory` and can be undone.
    """

    def __init__(
        self,
        source: PixelBuffer,
        *,
        wand_settings: MagicWandSettings | None = None,
        backend: PreviewBackend | None = None,
        history: CommandHistory | None = None,
    ) -> None:
        self._source = source
        self._mask: Optional[SelectionMask] = None
        self._filters = FilterState()
        self.stack = EffectStack()
        self.wand = SelectionEngine(wand_settings or MagicWandSettings(**DEFAULT_WAND_SETTINGS))
        self.history = history or CommandHistory()
        self._backend = backend or select_preview_backend()
        self._preview = self._backend.create_session(source)

    @property
    def source(self) -> PixelBuffer:
        return self._source

    @property
    def mask(self) -> Optional[SelectionMask]:
        return self._mask

    @property
    def filters(self) -> FilterState:
        return self._filters

    def _set_mask(self, mask: Optional[SelectionMask]) -> None:
        self._mask = mask

    def _set_filters(self, state: FilterState) -> None:
        self._filters = state

    def select_at(self, x: int, y: int) -> SelectionMask:
        """Run the magic wand at ``(x, y)`` and make the result the selection.

        ``"add"`` and ``"subtract"`` modes chain onto the current selection,
        ``"replace"`` starts from an empty mask.
        """

        settings = self.wand.settings
        previous = self._mask if settings.mode != "replace" else None
        mask = self.wand.select(self._source, x, y, previous_mask=previous)
        before = self._mask
        self.history.run(
            CallbackCommand(
                f"Magic wand ({settings.mode})",
                lambda: self._set_mask(mask),
                lambda: self._set_mask(before),
            )
        )
        logger.debug("Selection now covers %d pixels", mask.count)
        return mask

    def clear_selection(self) -> None:
        if self._mask is None:
            return
        before = self._mask
        self.history.run(
            CallbackCommand("Clear selection", lambda: self._set_mask(None), lambda: self._set_mask(before))
        )

    def set_filter(self, key: str, value: float) -> FilterState:
        """Set one base adjustment; unknown keys raise :class:`KeyError`."""

        before = self._filters
        after = before.with_value(key, value)
        self.history.run(
            CallbackCommand(
                f"Adjust {key}",
                lambda: self._set_filters(after),
                lambda: self._set_filters(before),
            )
        )
        return after

    def apply_preset(self, preset: Preset) -> None:
        """Replace the effect stack and base adjustments with *preset*."""

        nodes_before = self.stack.nodes
        filters_before = self._filters
        filters_after = FilterState().with_deltas(preset.controls)

        def execute() -> None:
            self.stack.set_stack(preset.stack)
            self._set_filters(filters_after)

        def undo() -> None:
            self.stack.set_stack(nodes_before)
            self._set_filters(filters_before)

        self.history.run(CallbackCommand(f"Preset {preset.name}", execute, undo))
        logger.info("Applied preset %s", preset.name)

    def effective_filters(self) -> FilterState:
        """Return the base adjustments merged with the enabled effect uniforms."""

        return resolve_filter_state(self._filters, self.stack.to_uniform_map())

    def render(self, *, restrict_to_selection: bool = True) -> PixelBuffer:
        """Return a new frame with the current adjustments applied to the source."""

        mask = self._mask if restrict_to_selection else None
        return self._backend.render(
            self._preview,
            self.effective_filters(),
            mask,
            self.stack.render_passes(),
        )

    def crop_to_selection(self) -> PixelBuffer:
        """Return the source pixels inside the selection bounds."""

        if self._mask is None:
            return self._source.copy()
        return crop_to_selection(self._source, self._mask)

    def undo(self) -> Optional[str]:
        return self.history.undo()

    def redo(self) -> Optional[str]:
        return self.history.redo()

    def close(self) -> None:
        self._backend.dispose_session(self._preview)


__all__ = ["EditSession"]
