"""xjstbuild Scheduler - Shared job queue that runs compile jobs off the caller's thread."""

from __future__ import annotations

import itertools
import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


class JobQueue:
    """One-shot request/response jobs on top of a concurrent.futures executor.

    Every push() settles its own future exactly once. Nothing is retried or
    cached here; a job that raises delivers the exception through its future.
    """

    def __init__(self, max_workers: int | None = None, executor: Executor | None = None):
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="xjst-job",
        )
        self._closed = False
        self._job_ids = itertools.count(1)

    def push(self, processor: Callable[..., Any], *args: Any) -> Future:
        """Run processor(*args) on a worker and return its future."""
        if self._closed:
            raise RuntimeError("Job queue is shut down")
        job_id = next(self._job_ids)
        name = getattr(processor, "__name__", type(processor).__name__)
        logger.debug("Job %d queued: %s", job_id, name)

        future = self._executor.submit(processor, *args)
        future.add_done_callback(lambda f: _log_settled(job_id, f))
        return future

    def shutdown(self, wait: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> JobQueue:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


def _log_settled(job_id: int, future: Future) -> None:
    if future.cancelled():
        logger.debug("Job %d cancelled", job_id)
    elif future.exception() is not None:
        logger.debug("Job %d failed: %s", job_id, future.exception())
    else:
        logger.debug("Job %d done", job_id)
