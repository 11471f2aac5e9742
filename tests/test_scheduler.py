"""Tests for the xjstbuild job queue."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from xjstbuild.compiler import CompileError
from xjstbuild.scheduler import JobQueue


# 1. Single job round trip
class TestSingleJob:
    def test_push_returns_result(self):
        with JobQueue(max_workers=1) as queue:
            future = queue.push(lambda a, b: a + b, 2, 3)
            assert future.result(timeout=5) == 5

    def test_push_delivers_exception(self):
        def fail():
            raise CompileError("bad template")

        with JobQueue(max_workers=1) as queue:
            future = queue.push(fail)
            with pytest.raises(CompileError, match="bad template"):
                future.result(timeout=5)

    def test_processor_called_once(self):
        processor = MagicMock(return_value="compiled")
        with JobQueue(max_workers=1) as queue:
            assert queue.push(processor, "code", {"devMode": True}).result(timeout=5) == "compiled"
        processor.assert_called_once_with("code", {"devMode": True})


# 2. Concurrent jobs settle independently
class TestConcurrentJobs:
    def test_jobs_in_flight_together(self):
        # Both jobs must be running at once to pass the barrier
        started = threading.Barrier(2, timeout=5)

        def slow(name):
            started.wait()
            return name

        with JobQueue(max_workers=2) as queue:
            first = queue.push(slow, "first")
            second = queue.push(slow, "second")
            assert first.result(timeout=5) == "first"
            assert second.result(timeout=5) == "second"

    def test_failure_does_not_affect_other_jobs(self):
        def maybe_fail(n):
            if n == 2:
                raise CompileError("job 2")
            return n

        with JobQueue(max_workers=4) as queue:
            futures = [queue.push(maybe_fail, n) for n in range(4)]
            assert futures[0].result(timeout=5) == 0
            assert futures[1].result(timeout=5) == 1
            assert isinstance(futures[2].exception(timeout=5), CompileError)
            assert futures[3].result(timeout=5) == 3


# 3. Lifecycle
class TestLifecycle:
    def test_push_after_shutdown(self):
        queue = JobQueue(max_workers=1)
        queue.shutdown()
        with pytest.raises(RuntimeError):
            queue.push(lambda: None)

    def test_shutdown_twice(self):
        queue = JobQueue(max_workers=1)
        queue.shutdown()
        queue.shutdown()

    def test_injected_executor_left_running(self):
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            with JobQueue(executor=executor) as queue:
                assert queue.push(lambda: "ok").result(timeout=5) == "ok"
            assert executor.submit(lambda: "still up").result(timeout=5) == "still up"
        finally:
            executor.shutdown()


# 4. Job ids in debug logs
class TestJobIds:
    def test_ids_unique_across_pushing_threads(self, caplog):
        caplog.set_level(logging.DEBUG, logger="xjstbuild.scheduler")
        with JobQueue(max_workers=4) as queue:
            def push_many():
                for _ in range(50):
                    queue.push(lambda: None)

            pushers = [threading.Thread(target=push_many) for _ in range(8)]
            for t in pushers:
                t.start()
            for t in pushers:
                t.join()

        ids = [r.args[0] for r in caplog.records if r.msg.startswith("Job %d queued")]
        assert len(ids) == 400
        assert sorted(ids) == list(range(1, 401))
