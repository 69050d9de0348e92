"""Tests for the NotStarted → Running → Completed lifecycle."""

import pytest

from pledge.core.errors import InvalidTransitionError
from pledge.core.result import Err, Ok
from pledge.execution.lifecycle import (
    VALID_TRANSITIONS,
    Completed,
    LifecycleStatus,
    NotStarted,
    Running,
    transition,
    validate_transition,
)


class TestStates:
    def test_status_labels(self):
        assert NotStarted().status == LifecycleStatus.NOT_STARTED
        assert Running().status == LifecycleStatus.RUNNING
        assert Completed(Ok(1)).status == LifecycleStatus.COMPLETED

    def test_only_completed_is_terminal(self):
        assert NotStarted().is_terminal is False
        assert Running().is_terminal is False
        assert Completed(Err("x")).is_terminal is True

    def test_completed_carries_result(self):
        assert Completed(Ok("user")).result == Ok("user")

    def test_states_compare_by_value(self):
        assert NotStarted() == NotStarted()
        assert Completed(Ok(1)) == Completed(Ok(1))
        assert Completed(Ok(1)) != Completed(Ok(2))

    def test_pattern_matching(self):
        match Completed(Err("offline")):
            case Completed(Err(error)):
                assert error == "offline"
            case _:
                pytest.fail("Completed(Err) did not match")


class TestTransitionTable:
    def test_every_status_has_entry(self):
        assert set(VALID_TRANSITIONS) == set(LifecycleStatus)

    def test_completed_is_terminal(self):
        assert VALID_TRANSITIONS[LifecycleStatus.COMPLETED] == frozenset()


class TestValidateTransition:
    @pytest.mark.parametrize(
        "current,target",
        [
            (NotStarted(), Running()),
            (Running(), Completed(Ok(1))),
        ],
    )
    def test_valid(self, current, target):
        validate_transition(current, target)
        assert transition(current, target) is target

    @pytest.mark.parametrize(
        "current,target",
        [
            (NotStarted(), Completed(Ok(1))),
            (NotStarted(), NotStarted()),
            (Running(), NotStarted()),
            (Running(), Running()),
            (Completed(Ok(1)), Running()),
            (Completed(Ok(1)), Completed(Ok(2))),
            (Completed(Ok(1)), NotStarted()),
        ],
    )
    def test_invalid(self, current, target):
        with pytest.raises(InvalidTransitionError) as exc_info:
            transition(current, target)
        assert exc_info.value.current == current.status.value
        assert exc_info.value.target == target.status.value

    def test_error_message(self):
        with pytest.raises(InvalidTransitionError, match="completed → running"):
            validate_transition(Completed(Ok(1)), Running())
