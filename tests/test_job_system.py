import collections
import enum
import random
import threading
import time

import pytest

from hyperengine.job import ScheduleMode, make_job
from hyperengine.job_system import JobSystem, JobSystemError, SystemStatistics


class TestJobType(enum.Enum):
    GRAPHICS = enum.auto()
    PHYSICS = enum.auto()
    AI = enum.auto()
    NETWORK = enum.auto()
    RESOURCE_LOADING = enum.auto()


class _Counter:
    def __init__(self):
        self._lock = threading.Lock()
        self.value = 0

    def increment(self):
        with self._lock:
            self.value += 1


@pytest.fixture
def system():
    js = JobSystem(4)
    js.start()
    yield js
    js.shutdown()


def test_basic_job_execution(system):
    counter = _Counter()
    system.submit(make_job(counter.increment, TestJobType.GRAPHICS))
    system.wait_for_completion()
    assert counter.value == 1


def test_multiple_jobs_execution(system):
    counter = _Counter()
    for _ in range(100):
        system.submit(make_job(counter.increment, TestJobType.GRAPHICS))
    system.wait_for_completion()
    assert counter.value == 100


@pytest.mark.parametrize("mode", [ScheduleMode.LIFO, ScheduleMode.FIFO])
def test_submit_to_single_worker(system, mode):
    order = []
    lock = threading.Lock()

    def record(i):
        with lock:
            order.append(i)

    for i in range(10):
        system.submit_to_worker(0, make_job(lambda i=i: record(i), TestJobType.GRAPHICS), mode)
    system.wait_for_completion()
    assert system.statistics().total_jobs_executed == 10
    assert len(order) == 10
    assert sorted(order) == list(range(10))


def test_custom_compatibility_function(system):
    counter = _Counter()
    system.register_compatibility_function(
        lambda a, b: a == b or (a == TestJobType.AI and b == TestJobType.NETWORK)
    )

    def slow():
        time.sleep(0.05)
        counter.increment()

    system.submit(make_job(slow, TestJobType.AI))
    system.submit(make_job(counter.increment, TestJobType.NETWORK))
    system.submit(make_job(counter.increment, TestJobType.GRAPHICS))
    system.wait_for_completion()
    assert counter.value == 3


def test_jobs_on_every_worker(system):
    counter = _Counter()
    jobs_per_worker = 10

    def work():
        time.sleep(0.001)
        counter.increment()

    for worker in range(system.num_workers):
        for _ in range(jobs_per_worker):
            system.submit_to_worker(worker, make_job(work, TestJobType.GRAPHICS))
    system.wait_for_completion()
    assert counter.value == jobs_per_worker * system.num_workers
    assert system.statistics().total_jobs_stolen == 0


def test_high_contention_stress(system):
    counter = _Counter()

    def work():
        counter.increment()
        time.sleep(0.0001)

    for _ in range(1000):
        system.submit(make_job(work, TestJobType.GRAPHICS))
    system.wait_for_completion()
    assert counter.value == 1000
    assert system.statistics().total_jobs_executed >= 1000


def test_mixed_job_types(system):
    counts = collections.Counter()
    lock = threading.Lock()
    system.register_incompatibility(TestJobType.GRAPHICS, TestJobType.PHYSICS)
    rng = random.Random(42)
    types = [TestJobType.GRAPHICS, TestJobType.PHYSICS, TestJobType.AI]

    def work(kind):
        with lock:
            counts[kind] += 1
        time.sleep(0.0005)

    for _ in range(100):
        kind = types[rng.randint(0, 2)]
        system.submit(make_job(lambda kind=kind: work(kind), kind))
    system.wait_for_completion()
    assert sum(counts.values()) == 100
    assert system.statistics().total_jobs_deferred == 0


def test_statistics(system):
    counter = _Counter()
    for _ in range(50):
        system.submit_function(counter.increment, TestJobType.GRAPHICS)
    system.wait_for_completion()
    stats = system.statistics()
    assert stats.total_jobs_executed >= 50
    assert stats.total_jobs_stolen == 0
    assert stats.total_jobs_deferred == 0
    assert counter.value == 50


def test_submit_function_multiple_jobs():
    counter = _Counter()
    with JobSystem(2) as js:
        for _ in range(100):
            js.submit_function(counter.increment, TestJobType.GRAPHICS)
        js.wait_for_completion()
    assert counter.value == 100


def test_concurrent_task_execution(system):
    lock = threading.Lock()
    state = {"current": 0, "max": 0}

    def task():
        with lock:
            state["current"] += 1
            state["max"] = max(state["max"], state["current"])
        time.sleep(0.01)
        with lock:
            state["current"] -= 1

    for _ in range(8):
        system.submit(make_job(task, TestJobType.GRAPHICS))
    system.wait_for_completion()
    assert system.statistics().total_jobs_executed == 8
    assert state["max"] > 1
    assert state["current"] == 0


def test_jobs_pushing_to_shared_deque():
    shared = collections.deque()
    counter = _Counter()
    with JobSystem(2) as js:
        for i in range(100):
            def push(i=i):
                shared.append(i)
                counter.increment()

            js.submit_function(push, TestJobType.GRAPHICS)
        js.wait_for_completion()
        executed = js.statistics().total_jobs_executed
    assert executed == 100
    assert counter.value == 100
    assert sorted(shared) == list(range(100))


def test_jobs_that_submit_more_jobs(system):
    counter = _Counter()

    def parent():
        for _ in range(5):
            system.submit(make_job(counter.increment, TestJobType.AI))
        counter.increment()

    for _ in range(4):
        system.submit(make_job(parent, TestJobType.AI))
    system.wait_for_completion()
    assert system.statistics().total_jobs_executed == 24
    assert counter.value == 24


@pytest.mark.parametrize("threads", [1, 2, 4])
def test_thread_counts(threads):
    counter = _Counter()
    with JobSystem(threads) as js:
        assert js.num_workers == threads
        for _ in range(500):
            js.submit(make_job(counter.increment, TestJobType.GRAPHICS))
        js.wait_for_completion()
        assert js.statistics().total_jobs_executed == 500
    assert counter.value == 500


def test_default_worker_count_is_positive():
    js = JobSystem()
    assert js.num_workers >= 1
    assert js.is_running is False


def test_submit_when_not_running_raises():
    js = JobSystem(2)
    with pytest.raises(JobSystemError):
        js.submit(make_job(lambda: None, TestJobType.AI))
    with pytest.raises(RuntimeError):
        js.submit_to_worker(0, make_job(lambda: None, TestJobType.AI))


def test_try_submit_when_not_running_returns_false():
    js = JobSystem(2)
    assert js.try_submit(make_job(lambda: None, TestJobType.AI)) is False


def test_try_submit_when_running(system):
    counter = _Counter()
    assert system.try_submit(make_job(counter.increment, TestJobType.AI)) is True
    system.wait_for_completion()
    assert counter.value == 1


def test_submit_to_invalid_worker_raises(system):
    with pytest.raises(IndexError):
        system.submit_to_worker(system.num_workers, make_job(lambda: None, TestJobType.AI))


def test_context_manager_starts_and_stops():
    with JobSystem(2) as js:
        assert js.is_running is True
    assert js.is_running is False
    with pytest.raises(JobSystemError):
        js.submit(make_job(lambda: None, TestJobType.AI))


def test_shutdown_drains_queued_jobs():
    counter = _Counter()
    js = JobSystem(2)
    js.start()

    def work():
        time.sleep(0.001)
        counter.increment()

    for _ in range(40):
        js.submit(make_job(work, TestJobType.GRAPHICS))
    js.shutdown()
    assert js.statistics().total_jobs_executed == 40
    assert counter.value == 40


def test_restart_after_shutdown():
    counter = _Counter()
    js = JobSystem(2)
    js.start()
    js.shutdown()
    js.start()
    js.submit(make_job(counter.increment, TestJobType.AI))
    js.wait_for_completion()
    js.shutdown()
    assert counter.value == 1


def test_failing_job_does_not_stall(system):
    counter = _Counter()

    def boom():
        raise ValueError("boom")

    system.submit(make_job(boom, TestJobType.AI))
    system.submit(make_job(counter.increment, TestJobType.AI))
    system.wait_for_completion()
    assert counter.value == 1
    assert system.statistics().total_jobs_executed == 2


def test_clear_compatibility_rules_keeps_running(system):
    counter = _Counter()
    system.register_incompatibility(TestJobType.GRAPHICS, TestJobType.PHYSICS)
    system.clear_compatibility_rules()
    system.submit(make_job(counter.increment, TestJobType.GRAPHICS))
    system.submit(make_job(counter.increment, TestJobType.PHYSICS))
    system.wait_for_completion()
    assert counter.value == 2


def test_statistics_value_type(system):
    stats = system.statistics()
    assert stats == SystemStatistics(0, 0, 0)