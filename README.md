# hyperengine

Building blocks for running hypergraph work in parallel. The package has no dependencies outside the standard library.

- **Jobs** (`hyperengine.job`): the abstract `Job` base class, `FunctionJob`, `CompatibilityAwareJob`,
  the `make_job` and `make_compatible_job` helpers, and `ScheduleMode` (`LIFO` / `FIFO`).
- **Job system** (`hyperengine.job_system`): `JobSystem` is a pool of worker threads.
  - Each worker has its own queue.
  - `submit` spreads jobs across the workers in round-robin order.
  - `submit_to_worker` sends a job to one named worker.
  - `wait_for_completion()` blocks until every submitted job has finished. This includes jobs that other jobs submit while they run.
- **Work-stealing scheduler** (`hyperengine.work_stealing_scheduler`):
  `WorkStealingScheduler` gives each worker its own deque.
  - A worker runs its own jobs most recent first.
  - When its deque is empty, it steals from the front of another worker's deque. It removes up to 32 jobs, keeps half and returns the rest.
  - `statistics()` and `queue_sizes()` report counters and queue state.
- **Concurrent containers** (`hyperengine.concurrent_hash_map`):
  `ConcurrentHashMap` and `ConcurrentHashSet` are thread-safe and lock per bucket.
  - `insert` and `insert_or_get` only add a key that is absent. An existing value is never overwritten.
- **Canonicalization** (`hyperengine.canonicalization`): `Canonicalizer.canonicalize_edges` finds the
  canonical form of an edge list. `Canonicalizer.are_isomorphic` compares two edge lists.
- **Task types** (`hyperengine.task_types`): `PatternMatchingTaskType` names the stages of a
  pattern-matching pipeline (`SCAN`, `EXPAND`, `SINK`, `REWRITE`, `CAUSAL`, `BRANCHIAL`).
  - `schedule_mode()` gives the ordering each stage is submitted with.
  - `scan_partitions` splits a range of edges into `(start, end)` scan ranges.

## Installation

```
pip install .
```

## Running jobs

```python
from hyperengine.job import make_job
from hyperengine.job_system import JobSystem
from hyperengine.task_types import PatternMatchingTaskType

results = []
with JobSystem(4) as jobs:
    for i in range(10):
        jobs.submit(make_job(lambda i=i: results.append(i), PatternMatchingTaskType.SCAN))
    jobs.wait_for_completion()
    print(jobs.statistics().total_jobs_executed)  # 10
```

**Errors and return values**

- `JobSystem.submit` and `submit_function` raise `JobSystemError` if the system has not been started.
- `try_submit` returns `False` instead of raising.
- `submit_to_worker` raises `JobSystemError` when the system is not running. It raises `IndexError` for a worker id that does not exist.
- `WorkStealingScheduler.submit` and `submit_to_worker` return `False` in both cases instead of raising.

**Behaviour to be aware of**

- An exception raised inside a job is logged and does not stop its worker.
- Each `JobSystem` worker runs its queue in arrival order. The `mode` argument of the submit methods is accepted but does not change the order.
- `register_incompatibility` and `register_compatibility_function` only record rules, and `clear_compatibility_rules` forgets them. The scheduler does not consult these rules.
- `statistics()` of a `JobSystem` always reports zero stolen and zero deferred jobs.

## Canonical forms

```python
from hyperengine.canonicalization import Canonicalizer

canon = Canonicalizer()
a = canon.canonicalize_edges([[10, 20], [10, 30]])
b = canon.canonicalize_edges([[100, 200], [100, 300]])
assert a.canonical_form == b.canonical_form
print(a.canonical_form)
print(a.vertex_mapping.map_vertex(10))
```

The search tries every ordering of the vertices. Its cost grows factorially with the number of vertices, so it suits small hypergraphs only.

## What the package does not do

The package has no hypergraph data type, pattern matcher, rewriting engine or multiway evolution. Canonicalization works on plain edge lists. `PatternMatchingTaskType` and `scan_partitions` describe how such work could be split into tasks, but no scan, expand, sink or rewrite tasks are implemented. There is no command-line program.

## Tests

```
pip install .[test]
pytest
```