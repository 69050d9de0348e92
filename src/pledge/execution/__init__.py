"""pledge execution: deferred computations and their composition.

WHY
───
Asynchronous results arrive through callbacks, at a time and on a thread
chosen by whoever does the work.  ``pledge.execution`` gives those results a
value to hold on to (``Deferred``), a way to chain the next step onto them
(``then`` / ``and_then``), and a shared, cached form for results that many
consumers want (``StatefulDeferred``).

ARCHITECTURE
────────────
::

    Deferred[T]                    lazy single-shot computation
      ├── TaskNode / ThenNode      explicit chain nodes
      ├── then / map               sequential composition
      └── and_then / map_ok / map_err / recover
                                   Result-aware, short-circuit on Err
      │
      ▼
    StatefulDeferred[T, E]         single-flight + cache + multicast
      └── NotStarted → Running → Completed(result)
      │
      ▼
    combinators / bridges
      ├── sequence / gather / collect
      └── from_future / submit / spawn / to_asyncio / wait

MODULE MAP (recommended reading order)
──────────────────────────────────────
  1. deferred.py      ─ Deferred, chain nodes, composition
  2. lifecycle.py     ─ lifecycle states + transition rules
  3. stateful.py      ─ StatefulDeferred
  4. combinators.py   ─ fan-out / fan-in
  5. bridges.py       ─ concurrent.futures / asyncio interop
"""

from pledge.execution.bridges import from_future, spawn, submit, to_asyncio, wait
from pledge.execution.combinators import collect, gather, sequence
from pledge.execution.deferred import (
    Callback,
    ChainNode,
    Deferred,
    Task,
    TaskNode,
    ThenNode,
)
from pledge.execution.lifecycle import (
    VALID_TRANSITIONS,
    Completed,
    LifecycleState,
    LifecycleStatus,
    NotStarted,
    Running,
    transition,
    validate_transition,
)
from pledge.execution.stateful import StatefulDeferred

__all__ = [
    # deferred
    "Callback",
    "ChainNode",
    "Deferred",
    "Task",
    "TaskNode",
    "ThenNode",
    # lifecycle
    "VALID_TRANSITIONS",
    "Completed",
    "LifecycleState",
    "LifecycleStatus",
    "NotStarted",
    "Running",
    "transition",
    "validate_transition",
    # stateful
    "StatefulDeferred",
    # combinators
    "collect",
    "gather",
    "sequence",
    # bridges
    "from_future",
    "spawn",
    "submit",
    "to_asyncio",
    "wait",
]
