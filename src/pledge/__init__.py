"""
pledge - callback-driven deferred computations.

- pledge.core: errors, Result envelope, logging, settings
- pledge.execution: Deferred, then/and_then composition, StatefulDeferred
"""

__version__ = "0.1.0"

from pledge.core.errors import PledgeError
from pledge.core.result import Err, Ok, Result
from pledge.execution import (
    Completed,
    Deferred,
    LifecycleState,
    NotStarted,
    Running,
    StatefulDeferred,
    collect,
    gather,
    sequence,
)

__all__ = [
    "__version__",
    "PledgeError",
    "Err",
    "Ok",
    "Result",
    "Completed",
    "Deferred",
    "LifecycleState",
    "NotStarted",
    "Running",
    "StatefulDeferred",
    "collect",
    "gather",
    "sequence",
]
