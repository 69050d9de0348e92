"""Fan-out / fan-in over many deferreds.

``sequence`` runs deferreds one after another through ``then`` links.
``gather`` runs them all at once and waits for every one of them.
``collect`` is ``gather`` for Result-producing deferreds, folded with
:func:`~pledge.core.result.collect_results` (fail-fast in input order).

All three are lazy: they only build a deferred.  ``sequence`` loops rather
than recursing when items deliver synchronously, so its length is not bounded
by the interpreter recursion limit.

Example::

    avatars = gather(fetch_avatar(user_id) for user_id in ids)
    avatars.run(render_grid)      # list in the same order as ids
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from functools import partial
from typing import Any, TypeVar

from pledge.core.logging import get_logger
from pledge.core.result import Result, collect_results
from pledge.execution.deferred import Callback, Deferred

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E")


@dataclass(slots=True)
class _Step:
    running: bool = True
    delivered: bool = False


class _InOrder:
    """Runs items one at a time and fires *callback* with every value.

    Item ``i + 1`` starts from item ``i``'s delivery.  A delivery that happens
    inside ``run`` is picked up by the ``advance`` loop instead of recursing.
    """

    def __init__(self, items: list[Deferred[Any]], callback: Callback[list[Any]]) -> None:
        self._items = items
        self._callback = callback
        self._values: list[Any] = []
        self._lock = threading.Lock()

    def advance(self, index: int) -> None:
        while index < len(self._items):
            step = _Step()
            self._items[index].run(partial(self._deliver, step, index))
            with self._lock:
                step.running = False
                inline = step.delivered
            if not inline:
                return
            index += 1
        self._callback(list(self._values))

    def _deliver(self, step: _Step, index: int, value: Any) -> None:
        with self._lock:
            duplicate = step.delivered
            if not duplicate:
                step.delivered = True
                self._values.append(value)
            resume = not duplicate and not step.running

        if duplicate:
            logger.warning("sequence_duplicate_delivery", index=index)
            return
        if resume:
            self.advance(index + 1)


def sequence(deferreds: Iterable[Deferred[T]]) -> Deferred[list[T]]:
    """Run *deferreds* strictly one after another; deliver their values in order.

    Each deferred is started only after the previous one has delivered.
    An empty input delivers ``[]`` synchronously.
    """
    items = list(deferreds)

    def run_in_order(callback: Callback[list[T]]) -> None:
        _InOrder(items, callback).advance(0)

    return Deferred(run_in_order, name="sequence")


class _FanIn:
    """Collects one value per slot and fires *callback* when all are filled."""

    def __init__(self, size: int, callback: Callback[list[Any]]) -> None:
        self._values: list[Any] = [None] * size
        self._filled = [False] * size
        self._remaining = size
        self._callback = callback
        self._lock = threading.Lock()

    def slot(self, index: int) -> Callback[Any]:
        def deliver(value: Any) -> None:
            with self._lock:
                if self._filled[index]:
                    duplicate = True
                else:
                    duplicate = False
                    self._filled[index] = True
                    self._values[index] = value
                    self._remaining -= 1
                done = not duplicate and self._remaining == 0

            if duplicate:
                logger.warning("gather_duplicate_delivery", index=index)
                return
            if done:
                self._callback(list(self._values))

        return deliver


def gather(deferreds: Iterable[Deferred[T]]) -> Deferred[list[T]]:
    """Run all *deferreds* at once; deliver their values in input order.

    The callback fires once, after the last deferred delivers, from whichever
    thread delivered last.  An empty input delivers ``[]`` synchronously.
    """
    items = list(deferreds)

    def run_all(callback: Callback[list[T]]) -> None:
        if not items:
            callback([])
            return
        fan_in = _FanIn(len(items), callback)
        for index, item in enumerate(items):
            item.run(fan_in.slot(index))

    return Deferred(run_all, name="gather")


def collect(deferreds: Iterable[Deferred[Result[T, E]]]) -> Deferred[Result[list[T], E]]:
    """Gather Result-producing deferreds into one Result.

    ``Ok(values)`` when every deferred succeeded, otherwise the first ``Err``
    in input order.  Every deferred is run to completion either way.
    """
    return gather(deferreds).map(collect_results)


__all__ = ["sequence", "gather", "collect"]
