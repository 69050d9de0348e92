"""StatefulDeferred: single-flight, cached, multicast deferred computation.

WHY
───
A plain :class:`~pledge.execution.deferred.Deferred` re-runs its task every
time it is run.  When several parts of an application want the same result
(a screen and its header both need the signed-in user), running the task
once per consumer wastes work and can produce inconsistent answers.
``StatefulDeferred`` runs its task at most once, caches the result, and
fans it out to every observer.

ARCHITECTURE
────────────
::

    StatefulDeferred(task)
      ├── .start(callback)   ─ observe (and start on first call)
      ├── .cancel()          ─ drop pending observers, task keeps going
      ├── .state             ─ NotStarted | Running | Completed(result)
      └── .as_deferred()     ─ compose with then() / and_then()

    start(cb) by state:
      NotStarted  → Running, register cb, run task (once, ever)
      Running     → register cb (no new task run)
      Completed   → cb(result) immediately, in the caller's frame

    task completion:
      Running → Completed(result), notify observers in registration
      order, clear the list

Delivery is dual-mode: observers registered before completion are notified
later (from whatever thread completes the task); observers registered after
completion are notified synchronously inside ``start``.  Callers must cope
with both.

Cancellation is observer-scoped.  ``cancel()`` discards the observers that
are currently waiting; the task still runs to completion and the result is
still cached.  Observers registered after a cancel are notified normally.
``cancel()`` before start or after completion is a no-op.

THREAD SAFETY
─────────────
One ``threading.RLock`` guards the state and the observer list.  Observer
callbacks and the task itself are always invoked outside the lock.

Related modules:
    lifecycle.py  — state dataclasses and transition validation
    deferred.py   — the lazy primitive this wraps

Example::

    current_user = StatefulDeferred(fetch_user, name="current_user")
    current_user.start(render_header)
    current_user.start(render_profile)   # no second fetch
    ...
    current_user.start(render_menu)      # after completion: immediate
"""

from __future__ import annotations

import threading
from typing import Any, Generic, TypeVar

from pledge.core.errors import DuplicateCompletionError, TaskError
from pledge.core.logging import get_logger
from pledge.core.result import Err, Result, is_result
from pledge.core.settings import get_settings
from pledge.execution.deferred import Callback, Deferred, Task
from pledge.execution.lifecycle import (
    Completed,
    LifecycleState,
    NotStarted,
    Running,
    transition,
)

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E")


def _outcome(result: Any) -> str:
    if not is_result(result):
        return "value"
    return "ok" if result.is_ok() else "err"


class StatefulDeferred(Generic[T, E]):
    """Deferred computation with lifecycle state, caching and multicast.

    The instance is meant to be shared: every holder sees the same
    transitions and the same cached result.

    Args:
        task: Function accepting one completion callback, which it must call
            with a ``Result[T, E]``.
        name: Optional label used in logs, errors and ``repr``.
        strict: Raise :class:`DuplicateCompletionError` when the task calls
            its completion callback twice.  ``None`` defers to
            ``PledgeSettings.strict_completion``.
    """

    def __init__(
        self,
        task: Task[Result[T, E]],
        *,
        name: str | None = None,
        strict: bool | None = None,
    ) -> None:
        if not callable(task):
            raise TypeError(f"'{type(task).__name__}' object is not callable")
        self._task = task
        self.name = name
        self._strict = strict
        self._state: LifecycleState = NotStarted()
        self._observers: list[Callback[Result[T, E]]] = []
        self._lock = threading.RLock()

    @classmethod
    def from_deferred(
        cls,
        deferred: Deferred[Result[T, E]],
        *,
        name: str | None = None,
        strict: bool | None = None,
    ) -> StatefulDeferred[T, E]:
        """Share an existing deferred: its chain will run at most once."""
        return cls(deferred.run, name=name or deferred.name, strict=strict)

    # ── Observation ──────────────────────────────────────────────────

    @property
    def state(self) -> LifecycleState:
        """Current lifecycle state (read-only)."""
        with self._lock:
            return self._state

    @property
    def is_completed(self) -> bool:
        return isinstance(self.state, Completed)

    @property
    def result(self) -> Result[T, E] | None:
        """The cached result, or ``None`` if the task has not completed."""
        state = self.state
        if isinstance(state, Completed):
            return state.result
        return None

    @property
    def observer_count(self) -> int:
        """Number of observers waiting for the result."""
        with self._lock:
            return len(self._observers)

    @property
    def strict(self) -> bool:
        if self._strict is not None:
            return self._strict
        return get_settings().strict_completion

    # ── Operations ───────────────────────────────────────────────────

    def start(self, callback: Callback[Result[T, E]]) -> None:
        """Observe the result, starting the task if nobody has yet.

        See the module docstring for the per-state behaviour.  The callback
        may be invoked before this method returns.
        """
        if not callable(callback):
            raise TypeError(f"'{type(callback).__name__}' object is not callable")

        with self._lock:
            state = self._state
            match state:
                case Completed(result):
                    cached = result
                case Running():
                    self._observers.append(callback)
                    observers = len(self._observers)
                    cached = None
                case NotStarted():
                    self._state = transition(state, Running())
                    self._observers.append(callback)
                    cached = None

        match state:
            case Completed():
                logger.debug("stateful_cache_hit", deferred=self.name)
                callback(cached)
            case Running():
                logger.debug("stateful_observer_added", deferred=self.name, observers=observers)
            case NotStarted():
                self._launch()

    def cancel(self) -> int:
        """Drop every pending observer without notifying it.

        The task is not interrupted and its result is still cached.

        Returns:
            Number of observers dropped (0 when not running).
        """
        with self._lock:
            if not isinstance(self._state, Running):
                return 0
            dropped = len(self._observers)
            self._observers.clear()

        logger.debug("stateful_cancelled", deferred=self.name, dropped=dropped)
        return dropped

    def as_deferred(self) -> Deferred[Result[T, E]]:
        """A plain deferred whose task is :meth:`start`, for composition."""
        return Deferred(self.start, name=self.name)

    # ── Internals ────────────────────────────────────────────────────

    def _launch(self) -> None:
        logger.debug("stateful_started", deferred=self.name)
        try:
            self._task(self._complete)
        except Exception as exc:
            error = TaskError(f"Task raised {type(exc).__name__}: {exc}", cause=exc)
            error.with_context(deferred=self.name, operation="start")
            observers = self._settle(Err(error))
            if observers is None:
                # Raised after (or while) delivering; the lifecycle is settled.
                raise
            logger.warning(
                "stateful_task_raised",
                deferred=self.name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            self._publish(Err(error), observers)

    def _settle(self, result: Result[T, E]) -> list[Callback[Result[T, E]]] | None:
        """Move to ``Completed(result)`` and take the observers.

        Returns ``None`` when the instance was already completed.
        """
        with self._lock:
            state = self._state
            if isinstance(state, Completed):
                return None
            self._state = transition(state, Completed(result))
            observers, self._observers = self._observers, []
        return observers

    def _complete(self, result: Result[T, E]) -> None:
        observers = self._settle(result)
        if observers is None:
            logger.warning("stateful_duplicate_completion", deferred=self.name)
            if self.strict:
                raise DuplicateCompletionError(self.name)
            return
        self._publish(result, observers)

    def _publish(
        self, result: Result[T, E], observers: list[Callback[Result[T, E]]]
    ) -> None:
        logger.debug(
            "stateful_completed",
            deferred=self.name,
            outcome=_outcome(result),
            observers=len(observers),
        )
        for callback in observers:
            self._notify(callback, result)

    def _notify(self, callback: Callback[Result[T, E]], result: Result[T, E]) -> None:
        # Observer errors are logged; later observers are still notified.
        try:
            callback(result)
        except Exception as e:
            logger.warning(
                "stateful_observer_error",
                deferred=self.name,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<StatefulDeferred{label} {self.state.status.value}>"


__all__ = ["StatefulDeferred"]
