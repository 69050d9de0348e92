"""Lifecycle states for stateful deferreds.

A :class:`~pledge.execution.stateful.StatefulDeferred` moves through exactly
three states.  Each state is its own frozen dataclass so that callers can
pattern-match on the current state and, for ``Completed``, pull the cached
result straight out of it.

Valid transition graph::

    NotStarted → Running → Completed(result)
    Completed  → (terminal)

Transition validation is strict.  Anything else raises
:class:`~pledge.core.errors.InvalidTransitionError`.

Example::

    match shared.state:
        case Completed(Ok(profile)):
            render(profile)
        case Completed(Err(error)):
            show_error(error)
        case Running():
            show_spinner()
        case NotStarted():
            shared.start(on_profile)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from pledge.core.errors import InvalidTransitionError
from pledge.core.result import Result

T = TypeVar("T")
E = TypeVar("E")


class LifecycleStatus(str, Enum):
    """Status label of a lifecycle state, for logging and display."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class NotStarted:
    """Nothing has asked for the result yet."""

    status: ClassVar[LifecycleStatus] = LifecycleStatus.NOT_STARTED

    @property
    def is_terminal(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Running:
    """The task has been started and has not delivered its result."""

    status: ClassVar[LifecycleStatus] = LifecycleStatus.RUNNING

    @property
    def is_terminal(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Completed(Generic[T, E]):
    """The task delivered *result*; this state never changes again."""

    result: Result[T, E]

    status: ClassVar[LifecycleStatus] = LifecycleStatus.COMPLETED

    @property
    def is_terminal(self) -> bool:
        return True


LifecycleState = NotStarted | Running | Completed


# --- Transition rules ---

VALID_TRANSITIONS: dict[LifecycleStatus, frozenset[LifecycleStatus]] = {
    LifecycleStatus.NOT_STARTED: frozenset({LifecycleStatus.RUNNING}),
    LifecycleStatus.RUNNING: frozenset({LifecycleStatus.COMPLETED}),
    LifecycleStatus.COMPLETED: frozenset(),  # terminal
}


def validate_transition(current: Any, target: Any) -> None:
    """Raise :class:`InvalidTransitionError` if *current → target* is illegal.

    Example:
        >>> validate_transition(Running(), Completed(Ok(1)))
        >>> # valid, no exception
        >>> validate_transition(NotStarted(), Completed(Ok(1)))
        InvalidTransitionError: Invalid lifecycle transition: not_started → completed
    """
    allowed = VALID_TRANSITIONS.get(current.status, frozenset())
    if target.status not in allowed:
        raise InvalidTransitionError(current.status.value, target.status.value)


def transition(current: LifecycleState, target: LifecycleState) -> LifecycleState:
    """Validate *current → target* and return *target*."""
    validate_transition(current, target)
    return target


__all__ = [
    "LifecycleStatus",
    "NotStarted",
    "Running",
    "Completed",
    "LifecycleState",
    "VALID_TRANSITIONS",
    "validate_transition",
    "transition",
]
