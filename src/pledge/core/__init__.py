"""pledge core -- errors, results, logging and settings.

Manifesto:
    Deferred computations report failure by delivering a value, not by
    raising.  ``pledge.core`` holds the pieces that make that workable: a
    Result envelope, an error hierarchy rich enough to be useful once it
    reaches the outermost callback, and the logging and settings shared by
    the execution layer.

Architecture::

    errors.py      Structured error hierarchy (PledgeError, TaskError, ...)
    result.py      Result[T, E] envelope (Ok / Err / try_result)
    logging.py     structlog configuration, get_logger, LogContext
    settings.py    PledgeSettings (pydantic-settings, PLEDGE_* env vars)
"""

from pledge.core.errors import (
    CompositionError,
    ConfigError,
    DuplicateCompletionError,
    ErrorCategory,
    ErrorContext,
    InvalidTransitionError,
    LifecycleError,
    PledgeError,
    TaskError,
    categorize_error,
    is_retryable,
)
from pledge.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    unbind_context,
)
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
from pledge.core.settings import PledgeSettings, get_settings, reset_settings

__all__ = [
    # errors
    "CompositionError",
    "ConfigError",
    "DuplicateCompletionError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidTransitionError",
    "LifecycleError",
    "PledgeError",
    "TaskError",
    "categorize_error",
    "is_retryable",
    # logging
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # result
    "Err",
    "Ok",
    "Result",
    "collect_results",
    "from_optional",
    "is_result",
    "partition_results",
    "try_result",
    # settings
    "PledgeSettings",
    "get_settings",
    "reset_settings",
]
