"""Job system, work-stealing scheduler, concurrent containers and hypergraph canonicalization."""

__version__ = "1.0.0"
__all__ = [
    "job",
    "job_system",
    "concurrent_hash_map",
    "canonicalization",
    "task_types",
    "work_stealing_scheduler",
]