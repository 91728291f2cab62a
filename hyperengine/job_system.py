"""A thread pool with one queue per worker and round-robin submission."""

from __future__ import annotations

import itertools
import logging
import os
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from hyperengine.job import Job, ScheduleMode, make_job

T = TypeVar("T")

_log = logging.getLogger(__name__)


class JobSystemError(RuntimeError):
    """Raised when work is submitted to a job system that is not running."""


@dataclass(frozen=True)
class SystemStatistics:
    total_jobs_executed: int
    total_jobs_stolen: int
    total_jobs_deferred: int


@dataclass(eq=False)
class _Worker:
    queue: deque = field(default_factory=deque)
    cv: threading.Condition = field(default_factory=threading.Condition)
    thread: threading.Thread | None = None
    stop: bool = False
    jobs_executed: int = 0
    jobs_executing: int = 0

    def is_idle(self) -> bool:
        with self.cv:
            return not self.queue and self.jobs_executing == 0


class JobSystem(Generic[T]):
    """Runs jobs on a fixed set of worker threads."""

    def __init__(self, num_threads: int = 0, queue_capacity: int = 1024) -> None:
        # queue_capacity is accepted for interface compatibility; queues are unbounded.
        del queue_capacity
        count = num_threads or os.cpu_count() or 1
        self._workers = [_Worker() for _ in range(max(count, 1))]
        self._round_robin = itertools.count()
        self._running = False
        self._state_lock = threading.Lock()
        self._completion = threading.Condition()
        self._submitted = 0
        self._completed = 0
        self._incompatible: set[frozenset] = set()
        self._compatibility_function: Callable[[T, T], bool] | None = None

    def __enter__(self) -> JobSystem[T]:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()

    def _run(self, worker: _Worker) -> None:
        while True:
            with worker.cv:
                worker.cv.wait_for(lambda: worker.stop or bool(worker.queue))
                if not worker.queue:
                    break
                job = worker.queue.popleft()
                worker.jobs_executing += 1
            try:
                job.execute()
            except Exception:
                _log.exception("job of type %r raised", job.job_type)
            finally:
                with worker.cv:
                    worker.jobs_executing -= 1
                    worker.jobs_executed += 1
                with self._completion:
                    self._completed += 1
                    self._completion.notify_all()

    def start(self) -> None:
        """Start the worker threads; does nothing if already running."""
        with self._state_lock:
            if self._running:
                return
            with self._completion:
                self._submitted = 0
                self._completed = 0
            for worker in self._workers:
                worker.stop = False
                worker.thread = threading.Thread(target=self._run, args=(worker,), daemon=True)
                worker.thread.start()
            self._running = True

    def shutdown(self) -> None:
        """Stop the workers after they drain their queues."""
        with self._state_lock:
            if not self._running:
                return
            for worker in self._workers:
                with worker.cv:
                    worker.stop = True
                    worker.cv.notify_all()
            for worker in self._workers:
                if worker.thread is not None:
                    worker.thread.join()
                    worker.thread = None
            self._running = False

    def _enqueue(self, worker: _Worker, job: Job[T]) -> None:
        with self._completion:
            self._submitted += 1
        with worker.cv:
            worker.queue.append(job)
            worker.cv.notify()

    def submit(self, job: Job[T], mode: ScheduleMode = ScheduleMode.LIFO) -> None:
        """Queue ``job`` on the next worker in round-robin order."""
        if not self._running:
            raise JobSystemError("job system is not running")
        worker = self._workers[next(self._round_robin) % len(self._workers)]
        self._enqueue(worker, job)

    def submit_to_worker(
        self, worker_id: int, job: Job[T], mode: ScheduleMode = ScheduleMode.LIFO
    ) -> None:
        """Queue ``job`` on a specific worker."""
        if not self._running:
            raise JobSystemError("job system is not running")
        if not 0 <= worker_id < len(self._workers):
            raise IndexError(f"invalid worker id {worker_id}")
        self._enqueue(self._workers[worker_id], job)

    def try_submit(self, job: Job[T], mode: ScheduleMode = ScheduleMode.LIFO) -> bool:
        """Submit ``job`` if running; return whether it was accepted."""
        if not self._running:
            return False
        self.submit(job, mode)
        return True

    def submit_function(
        self,
        func: Callable[[], object],
        job_type: T,
        priority: int = 0,
        mode: ScheduleMode = ScheduleMode.LIFO,
    ) -> None:
        """Wrap ``func`` in a job and submit it."""
        self.submit(make_job(func, job_type, priority), mode)

    def _all_done(self) -> bool:
        with self._completion:
            return self._submitted == self._completed

    def wait_for_completion(self) -> None:
        """Block until every submitted job, including ones they submit, has finished."""
        while True:
            with self._completion:
                self._completion.wait_for(
                    lambda: self._submitted == self._completed, timeout=0.01
                )
                if self._submitted != self._completed:
                    continue
            if all(worker.is_idle() for worker in self._workers) and self._all_done():
                return

    @property
    def num_workers(self) -> int:
        return len(self._workers)

    @property
    def is_running(self) -> bool:
        return self._running

    def statistics(self) -> SystemStatistics:
        """Counts of executed jobs; this pool neither steals nor defers."""
        executed = sum(worker.jobs_executed for worker in self._workers)
        return SystemStatistics(executed, 0, 0)

    def register_incompatibility(self, type1: T, type2: T) -> None:
        """Record that two job types should not run together; scheduling ignores it."""
        self._incompatible.add(frozenset((type1, type2)))

    def register_compatibility_function(self, func: Callable[[T, T], bool]) -> None:
        """Record a compatibility predicate; scheduling ignores it."""
        self._compatibility_function = func

    def clear_compatibility_rules(self) -> None:
        """Forget all recorded compatibility rules."""
        self._incompatible.clear()
        self._compatibility_function = None