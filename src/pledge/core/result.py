"""
Result envelope for success/failure values delivered through callbacks.

Provides a typed Result[T, E] pattern. A deferred computation cannot raise
into the code that is waiting for it (that code has already returned), so
failures travel the same road as successes: as values handed to the
completion callback. ``Ok`` carries a success value, ``Err`` carries an
application-defined error value (usually, but not necessarily, an Exception).

Manifesto:
    - **Explicit over Implicit:** Failures are values, not hidden exceptions
    - **Short-circuit:** map/flat_map pass Err through untouched
    - **Open error type:** E is whatever the application chooses
    - **Batch-friendly:** collect_results() / partition_results() for fan-in

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T, E]                             │
        │                    (Type Alias)                              │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[E]      │     Utilities           │
        │   (Success)     │   (Failure)     │                         │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: E      │ • try_result()          │
        │ • map()         │ • map_err()     │ • collect_results()     │
        │ • flat_map()    │ • or_else()     │ • partition_results()   │
        │ • unwrap()      │ • unwrap_or()   │ • from_optional()       │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    Pattern matching:

    >>> from pledge.core.result import Ok, Err, Result
    >>> def divide(a: int, b: int) -> Result[float, ValueError]:
    ...     if b == 0:
    ...         return Err(ValueError("Division by zero"))
    ...     return Ok(a / b)
    >>> match divide(10, 2):
    ...     case Ok(value):
    ...         print(f"Result: {value}")
    ...     case Err(error):
    ...         print(f"Error: {error}")
    Result: 5.0

    Chaining:

    >>> Ok(10).map(lambda x: x * 2).map(lambda x: x + 1).unwrap()
    21
    >>> Err("offline").map(lambda x: x * 2).unwrap_or(0)
    0

Guardrails:
    ❌ DON'T: Use unwrap() without checking is_ok() first
    ✅ DO: Use unwrap_or() or pattern matching for safe extraction

    ❌ DON'T: Raise inside map/flat_map functions
    ✅ DO: Return Err from flat_map if the operation can fail

Tags:
    result-pattern, error-handling, functional-programming, pledge

Doc-Types:
    - API Reference
    - Error Handling Tutorial
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pledge.core.errors import PledgeError


T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    Immutable (frozen dataclass, ``__slots__``). Hashable when the wrapped
    value is hashable.

    Examples:
        >>> ok = Ok(42)
        >>> ok.is_ok(), ok.is_err()
        (True, False)
        >>> Ok(10).map(lambda x: x * 2).unwrap()
        20
        >>> Ok(5).flat_map(lambda x: Ok(x) if x > 0 else Err("neg")).unwrap()
        5
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def unwrap_or_else(self, f: Callable[[Any], T]) -> T:
        """Get value or call f with error (always returns value for Ok)."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, Any]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain to another Result-returning function."""
        return f(self.value)

    def map_err(self, f: Callable[[Any], F]) -> Result[T, F]:
        """Transform error if Err (no-op for Ok)."""
        return self

    def or_else(self, f: Callable[[Any], Result[T, F]]) -> Result[T, F]:
        """Return self if Ok, otherwise call f with error."""
        return self

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Alias for flat_map."""
        return f(self.value)

    def inspect(self, f: Callable[[T], None]) -> Result[T, Any]:
        """Call f with value for side effects, return self."""
        f(self.value)
        return self

    def inspect_err(self, f: Callable[[Any], None]) -> Result[T, Any]:
        """Call f with error for side effects (no-op for Ok)."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failed result containing an error value.

    The error type is open: an Exception (preferably a PledgeError subclass),
    an enum member, a string. Err short-circuits transformation operations:
    map() and flat_map() return the same error unchanged, which is exactly
    what ``Deferred.and_then`` relies on to skip downstream steps.

    Examples:
        >>> err = Err(ValueError("something went wrong"))
        >>> err.is_err()
        True
        >>> err.unwrap_or("default")
        'default'
        >>> Err("x").or_else(lambda e: Ok("backup")).unwrap()
        'backup'
    """

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raise the error (wrapped in PledgeError if it is not an exception)."""
        if isinstance(self.error, BaseException):
            raise self.error
        raise PledgeError(f"Called unwrap() on Err({self.error!r})")

    def unwrap_or(self, default: T) -> T:
        """Get default since this is Err."""
        return default

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        """Call f with error to get value."""
        return f(self.error)

    def map(self, f: Callable[[Any], U]) -> Result[U, E]:
        """No-op for Err."""
        return self

    def flat_map(self, f: Callable[[Any], Result[U, E]]) -> Result[U, E]:
        """No-op for Err."""
        return self

    def map_err(self, f: Callable[[E], F]) -> Result[Any, F]:
        """Transform the error."""
        return Err(f(self.error))

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """Call f with error to try recovery."""
        return f(self.error)

    def and_then(self, f: Callable[[Any], Result[U, E]]) -> Result[U, E]:
        """No-op for Err."""
        return self

    def inspect(self, f: Callable[[Any], None]) -> Result[Any, E]:
        """No-op for Err."""
        return self

    def inspect_err(self, f: Callable[[E], None]) -> Result[Any, E]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, PledgeError):
            return {"ok": False, "error": self.error.to_dict()}
        if isinstance(self.error, BaseException):
            return {
                "ok": False,
                "error": {
                    "error_type": type(self.error).__name__,
                    "message": str(self.error),
                },
            }
        return {"ok": False, "error": self.error}

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[E]


# =============================================================================
# RESULT CONSTRUCTORS AND UTILITIES
# =============================================================================


def is_result(value: object) -> bool:
    """True if *value* is an Ok or an Err."""
    return isinstance(value, (Ok, Err))


def try_result(f: Callable[[], T]) -> Result[T, Exception]:
    """
    Execute a function and wrap its outcome in a Result.

    The bridge between exception-based code and Result-based code. Returns
    ``Ok(f())``, or ``Err(exc)`` if ``f`` raises any ``Exception``.

    Examples:
        >>> import json
        >>> try_result(lambda: json.loads('{"a": 1}')).unwrap()
        {'a': 1}
        >>> try_result(lambda: json.loads('invalid')).is_err()
        True

    Args:
        f: Zero-argument callable that may raise exceptions

    Returns:
        Ok[T] if f() succeeds, Err with the exception if f() raises
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(e)


def collect_results(results: list[Result[T, E]]) -> Result[list[T], E]:
    """
    Collect a list of Results into a Result of list (fail-fast).

    If all are Ok, returns Ok with the values in input order. Otherwise
    returns the first Err encountered.

    Architecture:
        ::

            [Ok(1), Ok(2), Ok(3)] ──────> Ok([1, 2, 3])

            [Ok(1), Err(x), Ok(3)] ─────> Err(x)  # stops at Err

    Examples:
        >>> collect_results([Ok(1), Ok(2)]).unwrap()
        [1, 2]
        >>> collect_results([Ok(1), Err("a"), Err("b")]).error
        'a'
        >>> collect_results([]).unwrap()
        []
    """
    values = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                return Err(error)
    return Ok(values)


def partition_results(
    results: list[Result[T, E]],
) -> tuple[list[T], list[E]]:
    """
    Partition results into successes and failures.

    Examples:
        >>> values, errors = partition_results([Ok(1), Err("a"), Ok(2)])
        >>> values
        [1, 2]
        >>> errors
        ['a']
    """
    values = []
    errors = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                errors.append(error)
    return values, errors


def from_optional(value: T | None, error: E) -> Result[T, E]:
    """
    Convert optional value to Result.

    Examples:
        >>> from_optional("cached", "miss").unwrap()
        'cached'
        >>> from_optional(None, "miss").error
        'miss'
    """
    if value is None:
        return Err(error)
    return Ok(value)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "is_result",
    "try_result",
    "collect_results",
    "partition_results",
    "from_optional",
]
