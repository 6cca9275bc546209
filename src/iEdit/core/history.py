"""Bounded undo/redo history of reversible edit commands."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from ..config import HISTORY_MAX_DEPTH

_LOGGER = logging.getLogger(__name__)


class Command(Protocol):
    label: str

    def execute(self) -> None:
        ...

    def undo(self) -> None:
        ...


class CallbackCommand:
    """Command built from a pair of callables."""

    def __init__(self, label: str, execute: Callable[[], None], undo: Callable[[], None]) -> None:
        self.label = label
        self._execute = execute
        self._undo = undo

    def execute(self) -> None:
        self._execute()

    def undo(self) -> None:
        self._undo()


class CommandHistory:
    """Run commands and keep them available for undo and redo.

    Running a new command discards the redo stack.  The undo stack keeps at
    most ``max_depth`` entries and drops the oldest command beyond that.
    """

    def __init__(self, max_depth: int = HISTORY_MAX_DEPTH) -> None:
        if max_depth <= 0:
            raise ValueError("max_depth must be positive")
        self._max_depth = max_depth
        self._history: List[Command] = []
        self._future: List[Command] = []

    def run(self, command: Command) -> None:
        command.execute()
        self._history.append(command)
        if len(self._history) > self._max_depth:
            dropped = self._history.pop(0)
            _LOGGER.debug("History full; dropped %r", dropped.label)
        self._future.clear()

    def undo(self) -> Optional[str]:
        """Undo the latest command and return its label, or ``None`` if there is none."""

        if not self._history:
            return None
        command = self._history.pop()
        command.undo()
        self._future.append(command)
        return command.label

    def redo(self) -> Optional[str]:
        if not self._future:
            return None
        command = self._future.pop()
        command.execute()
        self._history.append(command)
        return command.label

    def can_undo(self) -> bool:
        return bool(self._history)

    def can_redo(self) -> bool:
        return bool(self._future)

    def clear(self) -> None:
        self._history.clear()
        self._future.clear()

    def __len__(self) -> int:
        return len(self._history)


__all__ = ["CallbackCommand", "Command", "CommandHistory"]
