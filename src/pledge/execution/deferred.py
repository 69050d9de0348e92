"""Deferred: lazy, callback-driven, single-shot computations.

WHY
───
A value that only exists after a network call, a timer or a thread handoff
cannot be returned; it has to be delivered.  ``Deferred`` wraps the
function that knows how to produce it (the *task*) and does nothing until
someone asks for the result with :meth:`Deferred.run`.  Because nothing runs
at construction time, deferreds can be built, passed around and composed
freely before any work starts.

ARCHITECTURE
────────────
::

    Deferred[T]
      ├── Deferred(task)                ─ wrap task(callback)
      ├── Deferred.resolved(value)      ─ already-known value
      ├── .run(callback)                ─ execute the chain
      ├── .then(make_next)              ─ T -> Deferred[U]
      ├── .map(fn)                      ─ T -> U
      └── Result-aware (short-circuit on Err)
            ├── .and_then(make_next)    ─ T -> Deferred[Result[U, E]]
            ├── .map_ok(fn) / .map_err(fn)
            └── .recover(fn)            ─ E -> Deferred[Result[T, F]]

    Chain structure (each then() adds one backward-pointing node):

        d3 = d1.then(f).then(g)

        d3 ─► ThenNode(g) ─► d2 ─► ThenNode(f) ─► d1 ─► TaskNode(task)

        run(d3): d1's task runs first, then f's deferred, then g's.

Build order is the reverse of execution order: the most recently appended
link is the outermost node, but running it always runs its upstream first,
so the originally wrapped task executes before anything added by ``then``.

Related modules:
    stateful.py     — single-flight, cached, multicast variant
    combinators.py  — sequence / gather / collect
    bridges.py      — concurrent.futures and asyncio interop

Example::

    def fetch_user(callback):
        threading.Timer(0.1, callback, args=[{"id": 7}]).start()

    profile = Deferred(fetch_user).then(
        lambda user: Deferred.resolved(f"user-{user['id']}")
    )
    profile.run(print)   # prints "user-7" ~100ms later
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pledge.core.errors import CompositionError
from pledge.core.logging import get_logger
from pledge.core.result import Err, Ok, Result, is_result, try_result

logger = get_logger(__name__)

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")

Callback = Callable[[T], None]
Task = Callable[[Callable[[T], None]], None]


# ── Chain nodes ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class TaskNode(Generic[T]):
    """Leaf of a chain: the task function that actually produces a value."""

    task: Task[T]


@dataclass(frozen=True, slots=True)
class ThenNode(Generic[T, U]):
    """Link of a chain: run *upstream*, feed its value to *make_next*."""

    upstream: Deferred[T]
    make_next: Callable[[T], Deferred[U]]


ChainNode = TaskNode | ThenNode


def _run_node(node: ChainNode, callback: Callback) -> None:
    match node:
        case TaskNode(task):
            task(callback)
        case ThenNode(upstream, make_next):

            def on_upstream(value: Any) -> None:
                next_deferred = make_next(value)
                if not isinstance(next_deferred, Deferred):
                    raise CompositionError(
                        "then() continuation must return a Deferred, "
                        f"got {type(next_deferred).__name__}"
                    ).with_context(operation="then", deferred=upstream.name)
                next_deferred.run(callback)

            upstream.run(on_upstream)
        case _:
            raise CompositionError(f"Unknown chain node: {node!r}")


def _require_result(value: Any, operation: str) -> Result[Any, Any]:
    if not is_result(value):
        raise CompositionError(
            f"{operation}() expected an Ok or Err, got {type(value).__name__}"
        ).with_context(operation=operation)
    return value


# ── Deferred ─────────────────────────────────────────────────────────────


class Deferred(Generic[T]):
    """A value of type ``T`` that will be delivered to a callback later.

    The wrapped task receives a completion callback and must eventually call
    it exactly once, synchronously or from whatever thread, timer or event
    loop it uses internally.  Construction never calls the task.

    No error handling happens at this layer.  Failures are ordinary values
    (choose ``T`` to be a :data:`~pledge.core.result.Result` and compose with
    :meth:`and_then`), and an exception raised synchronously by a task
    propagates to the caller of :meth:`run`.

    Each :meth:`run` executes the chain again; use
    :class:`~pledge.execution.stateful.StatefulDeferred` for caching and
    single-flight behaviour.

    Args:
        task: Function accepting one completion callback.
        name: Optional label used in logs, errors and ``repr``.
    """

    __slots__ = ("_node", "name")

    def __init__(self, task: Task[T], *, name: str | None = None) -> None:
        if not callable(task):
            raise TypeError(f"'{type(task).__name__}' object is not callable")
        self._node: ChainNode = TaskNode(task)
        self.name = name

    @classmethod
    def _from_node(cls, node: ChainNode, name: str | None = None) -> Deferred[Any]:
        deferred = cls.__new__(cls)
        deferred._node = node
        deferred.name = name
        return deferred

    # ── Constructors ─────────────────────────────────────────────────

    @classmethod
    def resolved(cls, value: T, *, name: str | None = None) -> Deferred[T]:
        """A deferred whose task delivers *value* immediately and synchronously."""

        def deliver(callback: Callback[T]) -> None:
            callback(value)

        return cls(deliver, name=name)

    @classmethod
    def succeeded(cls, value: T, *, name: str | None = None) -> Deferred[Result[T, Any]]:
        """Shorthand for ``Deferred.resolved(Ok(value))``."""
        return cls.resolved(Ok(value), name=name)

    @classmethod
    def failed(cls, error: E, *, name: str | None = None) -> Deferred[Result[Any, E]]:
        """Shorthand for ``Deferred.resolved(Err(error))``."""
        return cls.resolved(Err(error), name=name)

    @classmethod
    def attempt(
        cls, fn: Callable[..., T], *args: Any, **kwargs: Any
    ) -> Deferred[Result[T, Exception]]:
        """Call *fn* when run, delivering ``Ok(return)`` or ``Err(exception)``."""

        def call(callback: Callback[Result[T, Exception]]) -> None:
            callback(try_result(lambda: fn(*args, **kwargs)))

        return cls(call, name=getattr(fn, "__name__", None))

    # ── Execution ────────────────────────────────────────────────────

    def run(self, callback: Callback[T]) -> None:
        """Run the chain, delivering the final value to *callback*."""
        _run_node(self._node, callback)

    # ── Composition ──────────────────────────────────────────────────

    def then(
        self, make_next: Callable[[T], Deferred[U]], *, name: str | None = None
    ) -> Deferred[U]:
        """Chain a deferred-producing continuation onto this deferred.

        Purely structural: nothing runs until the returned deferred is run.
        When it is, this deferred runs first; its value is passed to
        *make_next* and the deferred it returns is run with the outer
        callback.

        When every link delivers synchronously the whole chain runs on one
        stack, several frames per link, so chains of a few hundred links
        (``map`` included) can hit the interpreter recursion limit.  Use
        :func:`~pledge.execution.combinators.sequence` for long runs of
        independent steps.

        Raises (from the inner callback, at run time):
            CompositionError: If *make_next* does not return a Deferred.
        """
        if not callable(make_next):
            raise TypeError(f"'{type(make_next).__name__}' object is not callable")
        logger.debug("deferred_composed", deferred=self.name)
        return Deferred._from_node(ThenNode(self, make_next), name)

    def map(self, fn: Callable[[T], U]) -> Deferred[U]:
        """Transform the delivered value with a plain function."""
        return self.then(lambda value: Deferred.resolved(fn(value)))

    # ── Result-aware composition ─────────────────────────────────────

    def and_then(
        self: Deferred[Result[T, E]],
        make_next: Callable[[T], Deferred[Result[U, E]]],
        *,
        name: str | None = None,
    ) -> Deferred[Result[U, E]]:
        """Error-aware :meth:`then` for deferreds delivering a Result.

        ``Ok(value)`` runs ``make_next(value)``.  ``Err(error)`` is delivered
        to the outer callback unchanged and *make_next* is never called.
        """

        def step(result: Result[T, E]) -> Deferred[Result[U, E]]:
            match _require_result(result, "and_then"):
                case Ok(value):
                    return make_next(value)
                case _:
                    return Deferred.resolved(result)

        return self.then(step, name=name)

    def map_ok(self: Deferred[Result[T, E]], fn: Callable[[T], U]) -> Deferred[Result[U, E]]:
        """Transform ``Ok`` values; ``Err`` passes through unchanged."""
        return self.and_then(lambda value: Deferred.resolved(Ok(fn(value))))

    def map_err(self: Deferred[Result[T, E]], fn: Callable[[E], F]) -> Deferred[Result[T, F]]:
        """Transform ``Err`` values; ``Ok`` passes through unchanged."""
        return self.then(
            lambda result: Deferred.resolved(_require_result(result, "map_err").map_err(fn))
        )

    def recover(
        self: Deferred[Result[T, E]],
        fn: Callable[[E], Deferred[Result[T, F]]],
    ) -> Deferred[Result[T, F]]:
        """Replace an ``Err`` with the deferred returned by ``fn(error)``."""

        def step(result: Result[T, E]) -> Deferred[Result[T, F]]:
            match _require_result(result, "recover"):
                case Err(error):
                    return fn(error)
                case _:
                    return Deferred.resolved(result)

        return self.then(step)

    # ── Introspection ────────────────────────────────────────────────

    @property
    def node(self) -> ChainNode:
        """The chain node this deferred holds."""
        return self._node

    @property
    def depth(self) -> int:
        """Number of ``then`` links between this deferred and its source task."""
        depth = 0
        node = self._node
        while isinstance(node, ThenNode):
            depth += 1
            node = node.upstream._node
        return depth

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<Deferred{label} depth={self.depth}>"


__all__ = [
    "Callback",
    "Task",
    "TaskNode",
    "ThenNode",
    "ChainNode",
    "Deferred",
]
