"""Tests for concurrent.futures and asyncio bridges."""

import asyncio
import concurrent.futures
import threading

import pytest

from pledge.core.result import Err, Ok
from pledge.execution.bridges import from_future, spawn, submit, to_asyncio, wait
from pledge.execution.deferred import Deferred
from pledge.execution.stateful import StatefulDeferred


class TestFromFuture:
    def test_done_future_delivers_synchronously(self):
        future = concurrent.futures.Future()
        future.set_result(5)
        received = []
        from_future(future).run(received.append)
        assert received == [Ok(5)]

    def test_pending_future(self):
        future = concurrent.futures.Future()
        received = []
        from_future(future).run(received.append)
        assert received == []
        future.set_result("later")
        assert received == [Ok("later")]

    def test_exception_becomes_err(self):
        future = concurrent.futures.Future()
        error = ConnectionError("refused")
        future.set_exception(error)
        received = []
        from_future(future).run(received.append)
        assert received == [Err(error)]

    def test_cancelled_future(self):
        future = concurrent.futures.Future()
        assert future.cancel()
        received = []
        from_future(future).run(received.append)
        assert isinstance(received[0].error, concurrent.futures.CancelledError)


class TestSubmit:
    def test_lazy(self):
        calls = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
            submit(executor, calls.append, 1)
        assert calls == []

    def test_runs_on_executor(self):
        done = threading.Event()
        received = []

        def on_result(result):
            received.append(result)
            done.set()

        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
            submit(executor, pow, 2, 10).run(on_result)
            assert done.wait(timeout=5)
        assert received == [Ok(1024)]

    def test_each_run_submits_again(self):
        calls = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
            deferred = submit(executor, calls.append, "x")
            deferred.run(lambda result: None)
            deferred.run(lambda result: None)
        assert calls == ["x", "x"]

    def test_name_from_function(self):
        def load_profile():
            return {}

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            assert submit(executor, load_profile).name == "load_profile"

    def test_shared_submission_runs_once(self):
        calls = []
        done = threading.Event()
        received = []

        def record(result):
            received.append(result)
            if len(received) == 3:
                done.set()

        with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
            shared = StatefulDeferred(submit(executor, calls.append, "x").run)
            for _ in range(3):
                shared.start(record)
            assert done.wait(timeout=5)
        assert calls == ["x"]


class TestAsyncio:
    @pytest.mark.asyncio
    async def test_wait_resolved(self):
        assert await wait(Deferred.resolved(42)) == 42

    @pytest.mark.asyncio
    async def test_wait_completed_from_thread(self):
        def threaded(callback):
            threading.Timer(0.01, callback, args=["from-thread"]).start()

        assert await wait(Deferred(threaded)) == "from-thread"

    @pytest.mark.asyncio
    async def test_wait_chain(self):
        deferred = Deferred.succeeded(2).and_then(lambda x: Deferred.succeeded(x * 3))
        assert await wait(deferred) == Ok(6)

    @pytest.mark.asyncio
    async def test_synchronous_task_error_set_on_future(self):
        def broken(callback):
            raise RuntimeError("task exploded")

        with pytest.raises(RuntimeError, match="task exploded"):
            await wait(Deferred(broken))

    @pytest.mark.asyncio
    async def test_value_delivered_before_task_raised_wins(self):
        """A task that delivers and then raises still resolves with its value."""

        def deliver_then_raise(callback):
            callback(1)
            raise RuntimeError("after delivery")

        assert await to_asyncio(Deferred(deliver_then_raise)) == 1

    @pytest.mark.asyncio
    async def test_to_asyncio_explicit_loop(self):
        loop = asyncio.get_running_loop()
        future = to_asyncio(Deferred.resolved("v"), loop)
        assert isinstance(future, asyncio.Future)
        assert await future == "v"

    @pytest.mark.asyncio
    async def test_duplicate_delivery_keeps_first(self):
        holder = {}

        def task(callback):
            holder["callback"] = callback
            callback("first")

        future = to_asyncio(Deferred(task))
        holder["callback"]("second")
        assert await future == "first"

    @pytest.mark.asyncio
    async def test_spawn_on_running_loop(self):
        async def fetch(user_id):
            await asyncio.sleep(0)
            return {"id": user_id}

        deferred = spawn(asyncio.get_running_loop(), fetch, 7)
        assert deferred.name == "fetch"
        assert await wait(deferred) == Ok({"id": 7})

    @pytest.mark.asyncio
    async def test_spawn_error(self):
        async def fail():
            raise LookupError("missing")

        result = await wait(spawn(asyncio.get_running_loop(), fail))
        assert isinstance(result.error, LookupError)

    def test_spawn_from_other_thread(self):
        loop = asyncio.new_event_loop()
        thread = threading.Thread(target=loop.run_forever, daemon=True)
        thread.start()
        try:

            async def answer():
                return 42

            done = threading.Event()
            received = []

            def on_result(result):
                received.append(result)
                done.set()

            spawn(loop, answer).run(on_result)
            assert done.wait(timeout=5)
            assert received == [Ok(42)]
        finally:
            loop.call_soon_threadsafe(loop.stop)
            thread.join(timeout=5)
            loop.close()
