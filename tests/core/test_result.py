"""Tests for pledge.core.result module."""

import pytest

from pledge.core.errors import PledgeError, TaskError
from pledge.core.result import (
    Err,
    Ok,
    Result,
    collect_results,
    from_optional,
    is_result,
    partition_results,
    try_result,
)


class TestOk:
    """Test Ok class."""

    def test_create_ok(self):
        result = Ok(42)
        assert result.value == 42
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_unwrap_variants(self):
        result = Ok("hello")
        assert result.unwrap() == "hello"
        assert result.unwrap_or("x") == "hello"
        assert result.unwrap_or_else(lambda e: "x") == "hello"

    def test_map_chaining(self):
        result = Ok(3).map(lambda x: x * 2).map(lambda x: x + 1)
        assert result.unwrap() == 7

    def test_flat_map(self):
        """flat_map chains Result-returning functions."""

        def half(x: int) -> Result[int, str]:
            return Ok(x // 2) if x % 2 == 0 else Err("odd")

        assert Ok(4).flat_map(half) == Ok(2)
        assert Ok(3).flat_map(half) == Err("odd")
        assert Ok(4).and_then(half) == Ok(2)

    def test_error_side_is_no_op(self):
        assert Ok(1).map_err(lambda e: "other") == Ok(1)
        assert Ok(1).or_else(lambda e: Ok(2)) == Ok(1)

    def test_inspect(self):
        seen = []
        assert Ok(42).inspect(seen.append) == Ok(42)
        assert Ok(42).inspect_err(seen.append) == Ok(42)
        assert seen == [42]

    def test_to_dict(self):
        assert Ok({"k": 1}).to_dict() == {"ok": True, "value": {"k": 1}}

    def test_immutable(self):
        with pytest.raises(Exception):  # FrozenInstanceError or AttributeError
            Ok(1).value = 2

    def test_pattern_matching(self):
        match Ok(5):
            case Ok(value):
                assert value == 5
            case _:
                pytest.fail("Ok did not match")


class TestErr:
    """Test Err class."""

    def test_create_err(self):
        result = Err("offline")
        assert result.error == "offline"
        assert result.is_ok() is False
        assert result.is_err() is True

    def test_unwrap_raises_exception_error(self):
        with pytest.raises(ValueError, match="bad"):
            Err(ValueError("bad")).unwrap()

    def test_unwrap_non_exception_error(self):
        """Non-exception errors are raised wrapped in PledgeError."""
        with pytest.raises(PledgeError, match="offline"):
            Err("offline").unwrap()

    def test_unwrap_or(self):
        assert Err("x").unwrap_or(99) == 99
        assert Err("x").unwrap_or_else(lambda e: len(e)) == 1

    def test_short_circuit(self):
        """map and flat_map return the same Err."""
        err = Err("x")
        assert err.map(lambda v: v * 2) is err
        assert err.flat_map(lambda v: Ok(v)) is err
        assert err.and_then(lambda v: Ok(v)) is err

    def test_map_err(self):
        assert Err("x").map_err(str.upper) == Err("X")

    def test_or_else(self):
        assert Err("x").or_else(lambda e: Ok("backup")) == Ok("backup")

    def test_inspect_err(self):
        seen = []
        Err("x").inspect(seen.append).inspect_err(seen.append)
        assert seen == ["x"]

    def test_to_dict_pledge_error(self):
        d = Err(TaskError("boom")).to_dict()
        assert d["ok"] is False
        assert d["error"]["error_type"] == "TaskError"
        assert d["error"]["category"] == "TASK"

    def test_to_dict_plain_exception(self):
        d = Err(ValueError("bad")).to_dict()
        assert d == {"ok": False, "error": {"error_type": "ValueError", "message": "bad"}}

    def test_to_dict_plain_value(self):
        assert Err("offline").to_dict() == {"ok": False, "error": "offline"}

    def test_repr(self):
        assert repr(Err("x")) == "Err('x')"
        assert repr(Ok(1)) == "Ok(1)"


class TestUtilities:
    """Test module-level helpers."""

    def test_is_result(self):
        assert is_result(Ok(1))
        assert is_result(Err(1))
        assert not is_result(1)
        assert not is_result(None)

    def test_try_result_ok(self):
        assert try_result(lambda: 1 + 1) == Ok(2)

    def test_try_result_err(self):
        result = try_result(lambda: 1 / 0)
        assert result.is_err()
        assert isinstance(result.error, ZeroDivisionError)

    def test_collect_results_all_ok(self):
        assert collect_results([Ok(1), Ok(2)]) == Ok([1, 2])

    def test_collect_results_first_err(self):
        assert collect_results([Ok(1), Err("a"), Err("b")]) == Err("a")

    def test_collect_results_empty(self):
        assert collect_results([]) == Ok([])

    def test_partition_results(self):
        values, errors = partition_results([Ok(1), Err("a"), Ok(2), Err("b")])
        assert values == [1, 2]
        assert errors == ["a", "b"]

    def test_from_optional(self):
        assert from_optional("v", "miss") == Ok("v")
        assert from_optional(None, "miss") == Err("miss")
        assert from_optional(0, "miss") == Ok(0)
