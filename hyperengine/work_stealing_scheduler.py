"""A work-stealing scheduler for pattern-matching tasks.

Each worker keeps one double-ended queue. It takes its own work from the
back, most recent first, and steals from the front of other workers'
queues, taking half of what it removes.
"""

from __future__ import annotations

import itertools
import logging
import os
import random
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from hyperengine.job import Job, make_job
from hyperengine.task_types import PatternMatchingTaskType

_log = logging.getLogger(__name__)

MAX_STEALS = 32
MAX_STEAL_ATTEMPTS = 4
_IDLE_PAUSE = 0.0005

TaskJob = Job[PatternMatchingTaskType]


@dataclass(frozen=True)
class WorkerStatistics:
    worker_id: int
    jobs_executed: int
    jobs_stolen: int
    steal_attempts: int
    seeking_work: bool


@dataclass(frozen=True)
class SchedulerStatistics:
    total_jobs_executed: int
    total_jobs_stolen: int
    total_steal_attempts: int
    workers_seeking_work: int
    steal_success_rate: float
    per_worker_stats: list[WorkerStatistics] = field(default_factory=list)


@dataclass(frozen=True)
class QueueStatus:
    worker_id: int
    lifo_empty: bool
    seeking_work: bool


class WorkStealingWorker:
    """One worker's queue, flags and counters."""

    def __init__(self, worker_id: int) -> None:
        self.worker_id = worker_id
        self._queue: deque[TaskJob] = deque()
        self._lock = threading.Lock()
        self.thread: threading.Thread | None = None
        self.stop = False
        self.seeking_work = False
        self.executing = False
        self.jobs_executed = 0
        self.jobs_stolen = 0
        self.steal_attempts = 0

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._queue

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def try_get_local_work(self) -> TaskJob | None:
        """Take the most recently added job, or None if the queue is empty."""
        with self._lock:
            return self._queue.pop() if self._queue else None

    def _pop_front(self) -> TaskJob | None:
        with self._lock:
            return self._queue.popleft() if self._queue else None

    def _push_front(self, job: TaskJob) -> None:
        with self._lock:
            self._queue.appendleft(job)

    def try_steal_from(self, victim: WorkStealingWorker) -> list[TaskJob]:
        """Steal half of up to 32 of the victim's oldest jobs.

        A lone job is left with the victim and nothing is returned.
        """
        self.steal_attempts += 1
        taken: list[TaskJob] = []
        while len(taken) < MAX_STEALS:
            job = victim._pop_front()
            if job is None:
                break
            taken.append(job)

        if len(taken) > 1:
            keep = len(taken) // 2
            for job in taken[keep:]:
                victim._push_front(job)
            stolen = taken[:keep]
            self.jobs_stolen += len(stolen)
            return stolen
        if taken:
            victim._push_front(taken[0])
        return []

    def add_work(self, job: TaskJob) -> bool:
        """Append ``job`` to the back of the queue."""
        with self._lock:
            self._queue.append(job)
        return True


class WorkStealingScheduler:
    """Runs pattern-matching jobs on worker threads that steal from each other."""

    def __init__(self, num_workers: int = 0) -> None:
        count = num_workers or os.cpu_count() or 1
        self._workers = [WorkStealingWorker(i) for i in range(max(count, 1))]
        self._round_robin = itertools.count()
        self._running = False
        self._state_lock = threading.Lock()

    def __enter__(self) -> WorkStealingScheduler:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()

    def _find_stolen_work(self, worker: WorkStealingWorker, rng: random.Random) -> TaskJob | None:
        worker.seeking_work = True
        try:
            for _ in range(MAX_STEAL_ATTEMPTS):
                victim = self._workers[rng.randrange(len(self._workers))]
                if victim is worker or victim.seeking_work:
                    continue
                stolen = worker.try_steal_from(victim)
                if stolen:
                    # Mark busy before the rest become visible so waiters see the work.
                    worker.executing = True
                    for extra in stolen[1:]:
                        worker.add_work(extra)
                    return stolen[0]
            return None
        finally:
            worker.seeking_work = False

    def _run(self, worker: WorkStealingWorker) -> None:
        rng = random.Random(threading.get_ident())
        while not worker.stop:
            worker.executing = True
            job = worker.try_get_local_work()
            if job is None:
                worker.executing = False
                job = self._find_stolen_work(worker, rng)
                if job is None:
                    time.sleep(_IDLE_PAUSE)
                    continue
            try:
                job.execute()
            except Exception:
                _log.exception("job of type %r raised", job.job_type)
            finally:
                worker.jobs_executed += 1
                worker.executing = False

    def start(self) -> None:
        """Start the worker threads; does nothing if already running."""
        with self._state_lock:
            if self._running:
                return
            for worker in self._workers:
                worker.stop = False
                worker.thread = threading.Thread(target=self._run, args=(worker,), daemon=True)
                worker.thread.start()
            self._running = True

    def shutdown(self) -> None:
        """Signal every worker to stop and wait for the threads to exit."""
        with self._state_lock:
            if not self._running:
                return
            for worker in self._workers:
                worker.stop = True
            for worker in self._workers:
                if worker.thread is not None:
                    worker.thread.join()
                    worker.thread = None
            self._running = False

    def submit(self, job: TaskJob) -> bool:
        """Queue ``job`` on the next worker in round-robin order.

        Returns False if the scheduler is not running.
        """
        if not self._running:
            return False
        worker = self._workers[next(self._round_robin) % len(self._workers)]
        return worker.add_work(job)

    def submit_to_worker(self, worker_id: int, job: TaskJob) -> bool:
        """Queue ``job`` on a specific worker; False if not running or the id is invalid."""
        if not self._running or not 0 <= worker_id < len(self._workers):
            return False
        return self._workers[worker_id].add_work(job)

    def submit_function(
        self,
        func: Callable[[], object],
        task_type: PatternMatchingTaskType,
        priority: int = 0,
    ) -> bool:
        """Wrap ``func`` in a job and submit it."""
        return self.submit(make_job(func, task_type, priority))

    def wait_for_completion(self) -> None:
        """Block until every queue is empty and no worker is running a job."""
        while any(
            not worker.is_empty or worker.executing or worker.seeking_work
            for worker in self._workers
        ):
            time.sleep(_IDLE_PAUSE)

    @property
    def num_workers(self) -> int:
        return len(self._workers)

    @property
    def is_running(self) -> bool:
        return self._running

    def statistics(self) -> SchedulerStatistics:
        """Execution and stealing counts, in total and per worker."""
        per_worker = [
            WorkerStatistics(
                worker.worker_id,
                worker.jobs_executed,
                worker.jobs_stolen,
                worker.steal_attempts,
                worker.seeking_work,
            )
            for worker in self._workers
        ]
        executed = sum(s.jobs_executed for s in per_worker)
        stolen = sum(s.jobs_stolen for s in per_worker)
        attempts = sum(s.steal_attempts for s in per_worker)
        seeking = sum(1 for s in per_worker if s.seeking_work)
        rate = stolen / attempts if attempts else 0.0
        return SchedulerStatistics(executed, stolen, attempts, seeking, rate, per_worker)

    def queue_sizes(self) -> list[QueueStatus]:
        """Whether each worker's queue is empty and whether it is seeking work."""
        return [
            QueueStatus(worker.worker_id, worker.is_empty, worker.seeking_work)
            for worker in self._workers
        ]