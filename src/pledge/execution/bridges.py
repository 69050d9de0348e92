"""Bridges between deferreds and the standard concurrency primitives.

Manifesto:
    Deferreds do not schedule anything themselves; the task decides where
    work happens.  These helpers let that "where" be a thread pool or an
    asyncio event loop, and let coroutine code await a deferred.

    - **from_future / submit:** ``concurrent.futures`` → ``Deferred[Result]``
    - **spawn:** coroutine on an event loop → ``Deferred[Result]``
    - **to_asyncio / wait:** ``Deferred`` → awaitable

Architecture:
    ::

        executor.submit(fn) ──► Future ──add_done_callback──► cb(Ok | Err)

        deferred.run(cb) ──► cb fires on any thread
                                │
                                ▼
                 loop.call_soon_threadsafe(set_result)
                                │
                                ▼
                       await asyncio.Future

Guardrails:
    ❌ DON'T: Expect ``from_future`` to be lazy, the future already exists
    ✅ DO: Use ``submit`` when nothing should run until the deferred is run

Tags:
    asyncio, concurrent-futures, threads, interop, pledge

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Awaitable
from typing import Any, Callable, TypeVar

from pledge.core.result import Err, Ok, Result
from pledge.execution.deferred import Callback, Deferred

T = TypeVar("T")


def _future_outcome(future: concurrent.futures.Future[T]) -> Result[T, BaseException]:
    if future.cancelled():
        return Err(concurrent.futures.CancelledError())
    error = future.exception()
    if error is not None:
        return Err(error)
    return Ok(future.result())


def from_future(future: concurrent.futures.Future[T]) -> Deferred[Result[T, BaseException]]:
    """Wrap an existing ``concurrent.futures.Future``.

    Delivers ``Ok(result)``, ``Err(exception)``, or ``Err(CancelledError())``
    if the future was cancelled.  If the future is already done the callback
    fires synchronously inside ``run``.
    """

    def on_done(callback: Callback[Result[T, BaseException]]) -> None:
        future.add_done_callback(lambda done: callback(_future_outcome(done)))

    return Deferred(on_done, name="future")


def submit(
    executor: concurrent.futures.Executor,
    fn: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> Deferred[Result[T, BaseException]]:
    """Submit ``fn(*args, **kwargs)`` to *executor* each time the deferred runs."""

    def run_in_executor(callback: Callback[Result[T, BaseException]]) -> None:
        from_future(executor.submit(fn, *args, **kwargs)).run(callback)

    return Deferred(run_in_executor, name=getattr(fn, "__name__", None))


def spawn(
    loop: asyncio.AbstractEventLoop,
    coroutine_fn: Callable[..., Awaitable[T]],
    *args: Any,
) -> Deferred[Result[T, BaseException]]:
    """Schedule ``coroutine_fn(*args)`` on *loop* each time the deferred runs.

    Safe to run from any thread, including the loop's own.
    """

    def schedule(callback: Callback[Result[T, BaseException]]) -> None:
        future = asyncio.run_coroutine_threadsafe(coroutine_fn(*args), loop)
        from_future(future).run(callback)

    return Deferred(schedule, name=getattr(coroutine_fn, "__name__", None))


def _set_result(future: asyncio.Future[T], value: T) -> None:
    if not future.done():
        future.set_result(value)


def _set_exception(future: asyncio.Future[Any], error: BaseException) -> None:
    if not future.done():
        future.set_exception(error)


def to_asyncio(
    deferred: Deferred[T],
    loop: asyncio.AbstractEventLoop | None = None,
) -> asyncio.Future[T]:
    """Run *deferred* and return an ``asyncio.Future`` for its value.

    The value is handed to the loop with ``call_soon_threadsafe``, so the
    deferred may complete on any thread.  An exception raised synchronously
    by the deferred's task is handed over the same way, so whichever of the
    two reaches the loop first settles the future.

    Args:
        deferred: The deferred to run.
        loop: Target loop; defaults to the running loop.
    """
    loop = loop or asyncio.get_running_loop()
    future: asyncio.Future[T] = loop.create_future()

    def deliver(value: T) -> None:
        loop.call_soon_threadsafe(_set_result, future, value)

    try:
        deferred.run(deliver)
    except Exception as exc:
        loop.call_soon_threadsafe(_set_exception, future, exc)
    return future


async def wait(deferred: Deferred[T]) -> T:
    """Await the value of *deferred* from coroutine code."""
    return await to_asyncio(deferred)


__all__ = ["from_future", "submit", "spawn", "to_asyncio", "wait"]
