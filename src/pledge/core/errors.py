"""
Structured error types for pledge.

Provides a small hierarchy of typed errors with metadata for categorization,
logging and root cause analysis through error chaining.

Deferred computations deliver failures as values (``Err``), so most errors in
this hierarchy never escape as raised exceptions. They still need to carry
enough context to be useful once they reach the outermost callback:

- **Category:** What kind of failure (task, composition, lifecycle, config)
- **Retryable:** Whether the caller may reasonably try again
- **Context:** Structured metadata (deferred name, lifecycle status, ...)
- **Cause:** Chained underlying exception for root cause analysis

Manifesto:
    - **Typed Error Hierarchy:** One subclass per failure domain
    - **Errors as values:** Safe to deliver inside ``Err`` and compare later
    - **Rich Context:** Errors carry metadata for structured logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        PledgeError                               │
        │  (category, retryable, context, cause)                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  TaskError          CompositionError     LifecycleError          │
        │  (TASK)             (COMPOSITION)        (LIFECYCLE)             │
        │                                               │                  │
        │                                   InvalidTransitionError         │
        │                                   DuplicateCompletionError       │
        │                                                                  │
        │  ConfigError                                                     │
        │  (CONFIG)                                                        │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Wrapping a task failure:

    >>> try:
    ...     raise ConnectionError("socket closed")
    ... except ConnectionError as e:
    ...     error = TaskError("fetch_user failed", cause=e)
    >>> error.category
    <ErrorCategory.TASK: 'TASK'>
    >>> error.cause
    ConnectionError('socket closed')

    Adding context:

    >>> error = CompositionError("continuation returned int")
    >>> error.with_context(deferred="load_profile").context.deferred
    'load_profile'

Guardrails:
    ❌ DON'T: Raise inside a task when a failure can be delivered as ``Err``
    ✅ DO: Deliver ``Err(TaskError(...))`` through the completion callback

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, pledge

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Categories are grouped by where the failure originated:
    - **Work:** TASK (the wrapped operation itself failed)
    - **Wiring:** COMPOSITION (a continuation broke the chain contract)
    - **State:** LIFECYCLE (illegal transition, duplicate completion)
    - **Setup:** CONFIG, VALIDATION
    - **Other:** CANCELLATION, INTERNAL, UNKNOWN

    Examples:
        >>> ErrorCategory.TASK.value
        'TASK'
        >>> PledgeError("boom", category=ErrorCategory.LIFECYCLE).category
        <ErrorCategory.LIFECYCLE: 'LIFECYCLE'>
    """

    TASK = "TASK"                   # Wrapped operation raised or failed
    COMPOSITION = "COMPOSITION"     # then/and_then contract violated
    LIFECYCLE = "LIFECYCLE"         # State machine misuse
    CANCELLATION = "CANCELLATION"   # Work cancelled before completing
    CONFIG = "CONFIG"               # Missing or invalid settings
    VALIDATION = "VALIDATION"       # Bad argument values
    INTERNAL = "INTERNAL"           # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"             # Uncategorized errors


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields for the metadata pledge itself knows about, plus a free-form
    ``metadata`` dict for anything the application wants to attach. ``to_dict``
    serializes only the fields that are set.

    Examples:
        >>> ctx = ErrorContext(deferred="fetch_user", status="running")
        >>> ctx.to_dict()
        {'deferred': 'fetch_user', 'status': 'running'}

        >>> ctx = ErrorContext()
        >>> ctx.metadata["user_id"] = 42
        >>> ctx.to_dict()
        {'user_id': 42}

    Attributes:
        deferred: Name of the deferred computation involved
        status: Lifecycle status at the time of the error
        operation: Operation being performed (``start``, ``then``, ...)
        metadata: Additional key-value pairs
    """

    deferred: str | None = None
    status: str | None = None
    operation: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["deferred", "status", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class PledgeError(Exception):
    """
    Base exception for all pledge errors.

    Every error created by the library extends PledgeError so that consumers
    can route on ``category`` and serialize with ``to_dict`` regardless of the
    concrete subclass.

    All PledgeError instances carry:
    - **category:** ErrorCategory enum for classification
    - **retryable:** Boolean hint for callers layering retries by composition
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` and ``default_retryable`` class
    attributes to provide defaults for their domain.

    Architecture:
        ::

            ┌─────────────────────────────────────────────────────────────┐
            │                       PledgeError                            │
            ├─────────────────────────────────────────────────────────────┤
            │  default_category: ErrorCategory = INTERNAL                  │
            │  default_retryable: bool = False                             │
            ├─────────────────────────────────────────────────────────────┤
            │  message, category, retryable, context, cause                │
            ├─────────────────────────────────────────────────────────────┤
            │  with_context(**kwargs) -> PledgeError                       │
            │  to_dict() -> dict                                           │
            └─────────────────────────────────────────────────────────────┘

    Examples:
        >>> error = PledgeError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        >>> d = PledgeError("bad", category=ErrorCategory.VALIDATION).to_dict()
        >>> d["category"]
        'VALIDATION'

    Guardrails:
        ❌ DON'T: Use plain Exception for failures the library reports
        ✅ DO: Use the PledgeError subclass for the failure domain

        ❌ DON'T: Forget to chain the original exception
        ✅ DO: Always pass cause= when wrapping exceptions

    Tags:
        exception, error-hierarchy, error-context, pledge, base-class

    Doc-Types:
        - API Reference
        - Error Handling Guide
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> PledgeError:
        """
        Add context to this error (fluent API).

        Usage:
            raise TaskError("Failed").with_context(
                deferred="fetch_user",
                operation="start",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TASK ERRORS
# =============================================================================


class TaskError(PledgeError):
    """
    A wrapped task raised instead of delivering a result.

    Retryability is inherited from the cause when the cause is itself a
    PledgeError, otherwise it defaults to False.
    """

    default_category = ErrorCategory.TASK

    def __init__(self, message: str, *, cause: BaseException | None = None, **kwargs: Any):
        if "retryable" not in kwargs and isinstance(cause, PledgeError):
            kwargs["retryable"] = cause.retryable
        super().__init__(message, cause=cause, **kwargs)


# =============================================================================
# COMPOSITION ERRORS
# =============================================================================


class CompositionError(PledgeError):
    """A continuation broke the composition contract."""

    default_category = ErrorCategory.COMPOSITION


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================


class LifecycleError(PledgeError):
    """Stateful deferred was driven in a way its state machine forbids."""

    default_category = ErrorCategory.LIFECYCLE


class InvalidTransitionError(LifecycleError, ValueError):
    """Raised when an illegal lifecycle transition is attempted.

    Transition validation is strict: ``NotStarted -> Running -> Completed``
    and nothing else.
    """

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid lifecycle transition: {current} → {target}")


class DuplicateCompletionError(LifecycleError):
    """A task invoked its completion callback more than once."""

    def __init__(self, name: str | None = None):
        self.deferred_name = name
        label = f" {name!r}" if name else ""
        super().__init__(f"Deferred{label} completed more than once")
        self.context.deferred = name


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(PledgeError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, PledgeError):
        return error.retryable
    retryable_types = (
        ConnectionError,
        TimeoutError,
        BrokenPipeError,
    )
    return isinstance(error, retryable_types)


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, PledgeError):
        return error.category
    if isinstance(error, (concurrent.futures.CancelledError, asyncio.CancelledError)):
        return ErrorCategory.CANCELLATION
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "PledgeError",
    # Domains
    "TaskError",
    "CompositionError",
    "LifecycleError",
    "InvalidTransitionError",
    "DuplicateCompletionError",
    "ConfigError",
    # Utilities
    "is_retryable",
    "categorize_error",
]
