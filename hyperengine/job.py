"""Units of work tagged with a job type and a priority."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class ScheduleMode(enum.Enum):
    """How a submitted job should be ordered relative to queued work."""

    LIFO = "lifo"  # last in, first out: cache-friendly for related tasks
    FIFO = "fifo"  # first in, first out: fair scheduling


class Job(ABC, Generic[T]):
    """A unit of work that can be executed by a job system."""

    @abstractmethod
    def execute(self) -> None:
        """Run the work."""

    @property
    @abstractmethod
    def job_type(self) -> T:
        """The type tag of this job."""

    @property
    def priority(self) -> int:
        return 0

    def is_compatible_with(self, other_type: T) -> bool:
        """Whether this job may run alongside a job of ``other_type``."""
        return True


class FunctionJob(Job[T]):
    """A job that calls a function taking no arguments."""

    def __init__(self, func: Callable[[], object], job_type: T, priority: int = 0) -> None:
        if not callable(func):
            raise TypeError("job function must be callable")
        self._func = func
        self._job_type = job_type
        self._priority = priority

    def execute(self) -> None:
        self._func()

    @property
    def job_type(self) -> T:
        return self._job_type

    @property
    def priority(self) -> int:
        return self._priority


class CompatibilityAwareJob(Job[T]):
    """Wraps a job and answers compatibility questions with a custom check."""

    def __init__(self, job: Job[T], compatibility_check: Callable[[T, T], bool]) -> None:
        self._job = job
        self._check = compatibility_check

    def execute(self) -> None:
        self._job.execute()

    @property
    def job_type(self) -> T:
        return self._job.job_type

    @property
    def priority(self) -> int:
        return self._job.priority

    def is_compatible_with(self, other_type: T) -> bool:
        return bool(self._check(self.job_type, other_type))


def make_job(func: Callable[[], object], job_type: T, priority: int = 0) -> FunctionJob[T]:
    """Create a job that runs ``func``."""
    return FunctionJob(func, job_type, priority)


def make_compatible_job(
    job: Job[T], compatibility_check: Callable[[T, T], bool]
) -> CompatibilityAwareJob[T]:
    """Wrap ``job`` so its compatibility is decided by ``compatibility_check``."""
    return CompatibilityAwareJob(job, compatibility_check)