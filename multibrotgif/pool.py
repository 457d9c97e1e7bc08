"""
Bounded worker pool.

Architecture
------------
Frames are rendered on a ``concurrent.futures`` executor, a process pool
by default since the escape-time kernel is CPU-bound.  A thread pool can
be selected instead, which the test-suite uses to instrument renders.

Concurrency limit
-----------------
A PermitPool (bounded semaphore) is acquired before every submission and
released when that frame's future completes.  Submission therefore
blocks once C frames are in flight, and at most C renders ever run at
the same time.  The default C is ``os.cpu_count()``.

Barrier
-------
``run()`` submits every task from a dispatcher thread and then joins on
the ResultCollector in the calling thread.  Completion and failure are
both observed at that join point; on failure, undispatched tasks are
never submitted and queued futures are cancelled.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import (
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
)
from functools import partial
from typing import Callable, Iterable

import numpy as np

from multibrotgif.collector import ResultCollector
from multibrotgif.types import ExecutorKind, FrameResult, FrameTask

logger = logging.getLogger(__name__)

RenderFn = Callable[[FrameTask], FrameResult]


class PermitPool:
    """Counting limiter with in-flight instrumentation."""

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"permit limit must be >= 1, got {limit}")
        self.limit = limit
        self._sem = threading.BoundedSemaphore(limit)
        self._lock = threading.Lock()
        self.active = 0
        self.peak = 0

    def acquire(self) -> None:
        self._sem.acquire()
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)

    def release(self) -> None:
        with self._lock:
            self.active -= 1
        self._sem.release()


class BoundedWorkerPool:
    """Runs one render per task with at most *max_workers* in flight."""

    def __init__(
        self,
        render: RenderFn,
        max_workers: int,
        executor: ExecutorKind = ExecutorKind.PROCESS,
    ) -> None:
        self.render = render
        self.max_workers = max_workers
        self.executor_kind = executor
        self.permits = PermitPool(max_workers)
        self.submitted = 0

    def _make_executor(self) -> Executor:
        if self.executor_kind is ExecutorKind.THREAD:
            return ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="multibrot-render",
            )
        return ProcessPoolExecutor(max_workers=self.max_workers)

    def _on_done(
        self,
        index: int,
        collector: ResultCollector,
        fut: Future[FrameResult],
    ) -> None:
        self.permits.release()
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            collector.publish_failure(index, exc)
        else:
            collector.publish(fut.result())

    def _dispatch(
        self,
        pool: Executor,
        tasks: Iterable[FrameTask],
        collector: ResultCollector,
        stop: threading.Event,
    ) -> None:
        for task in tasks:
            self.permits.acquire()
            if stop.is_set():
                self.permits.release()
                return
            try:
                fut = pool.submit(self.render, task)
            except RuntimeError as exc:
                # Executor shut down or broken underneath us.
                self.permits.release()
                collector.publish_failure(task.index, exc)
                return
            self.submitted += 1
            fut.add_done_callback(partial(self._on_done, task.index, collector))
        logger.debug("Dispatched %d frames.", self.submitted)

    def run(
        self,
        tasks: Iterable[FrameTask],
        collector: ResultCollector,
    ) -> list[np.ndarray]:
        """Render every task and return the rasters in sequence order."""
        pool = self._make_executor()
        stop = threading.Event()
        dispatcher = threading.Thread(
            target=self._dispatch,
            args=(pool, tasks, collector, stop),
            name="multibrot-dispatch",
            daemon=True,
        )
        logger.info(
            "Rendering %d frames on %d %s workers.",
            collector.total, self.max_workers, self.executor_kind.value,
        )
        dispatcher.start()
        try:
            rasters = collector.collect()
        except BaseException:
            stop.set()
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        dispatcher.join()
        pool.shutdown(wait=True)
        return rasters
