"""
Test support utilities for pledge tests.

Task doubles that let a test decide exactly when (and how often) a deferred
computation completes, instead of relying on timers or threads.
"""

from __future__ import annotations

from typing import Any, Callable


class ManualTask:
    """Task function whose completion is triggered by the test.

    Every invocation is recorded; ``complete(value)`` delivers *value* to
    every callback the task has been given so far (or only the latest one
    with ``latest_only=True``).

    Usage::

        task = ManualTask()
        deferred = Deferred(task)
        deferred.run(received.append)
        assert task.calls == 1
        task.complete(42)
    """

    def __init__(self) -> None:
        self.callbacks: list[Callable[[Any], None]] = []

    def __call__(self, callback: Callable[[Any], None]) -> None:
        self.callbacks.append(callback)

    @property
    def calls(self) -> int:
        return len(self.callbacks)

    @property
    def pending(self) -> bool:
        return bool(self.callbacks)

    def complete(self, value: Any, *, latest_only: bool = False) -> None:
        if not self.callbacks:
            raise AssertionError("ManualTask.complete() called before the task was run")
        targets = self.callbacks[-1:] if latest_only else list(self.callbacks)
        for callback in targets:
            callback(value)


def recorder(log: list[Any], label: str) -> Callable[[Any], None]:
    """Callback that appends ``(label, value)`` to *log*."""

    def record(value: Any) -> None:
        log.append((label, value))

    return record
