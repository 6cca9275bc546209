from __future__ import annotations

import pytest

from iEdit.core.history import CallbackCommand, CommandHistory


class _Counter:
    def __init__(self) -> None:
        self.value = 0

    def command(self, amount: int) -> CallbackCommand:
        def execute() -> None:
            self.value += amount

        def undo() -> None:
            self.value -= amount

        return CallbackCommand(f"add {amount}", execute, undo)


def test_run_undo_redo() -> None:
    counter = _Counter()
    history = CommandHistory()

    history.run(counter.command(2))
    history.run(counter.command(5))
    assert counter.value == 7

    assert history.undo() == "add 5"
    assert counter.value == 2
    assert history.can_redo()

    assert history.redo() == "add 5"
    assert counter.value == 7
    assert not history.can_redo()


def test_empty_history_returns_none() -> None:
    history = CommandHistory()
    assert history.undo() is None
    assert history.redo() is None
    assert not history.can_undo()


def test_new_command_discards_redo() -> None:
    counter = _Counter()
    history = CommandHistory()
    history.run(counter.command(1))
    history.undo()

    history.run(counter.command(10))

    assert not history.can_redo()
    assert counter.value == 10


def test_depth_limit_drops_oldest() -> None:
    counter = _Counter()
    history = CommandHistory(max_depth=2)
    for amount in (1, 2, 3):
        history.run(counter.command(amount))

    assert len(history) == 2
    assert history.undo() == "add 3"
    assert history.undo() == "add 2"
    assert history.undo() is None
    assert counter.value == 1


def test_clear_and_invalid_depth() -> None:
    counter = _Counter()
    history = CommandHistory()
    history.run(counter.command(1))
    history.clear()
    assert len(history) == 0 and not history.can_undo()

    with pytest.raises(ValueError):
        CommandHistory(max_depth=0)
