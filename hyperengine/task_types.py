"""Task types of the scan/expand/sink pattern-matching pipeline."""

from __future__ import annotations

import enum
from typing import Iterator

from hyperengine.job import ScheduleMode


class PatternMatchingTaskType(enum.Enum):
    """Kinds of work in the pattern-matching and rewriting pipeline."""

    SCAN = "scan"  # partition signatures and find initial candidates
    EXPAND = "expand"  # extend partial matches under constraints
    SINK = "sink"  # process complete matches
    REWRITE = "rewrite"  # apply rewriting rules
    CAUSAL = "causal"  # compute causal edges between events
    BRANCHIAL = "branchial"  # compute branchial edges between events

    def schedule_mode(self) -> ScheduleMode:
        """The queue ordering this kind of task is submitted with.

        Scan and expand tasks run most-recent-first to keep memory low;
        the remaining kinds are processed in arrival order.
        """
        if self in (PatternMatchingTaskType.SCAN, PatternMatchingTaskType.EXPAND):
            return ScheduleMode.LIFO
        return ScheduleMode.FIFO


def scan_partitions(num_edges: int, num_partitions: int) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` edge ranges that split ``num_edges`` across partitions.

    Every partition gets ``num_edges // num_partitions`` edges; the last one
    also takes the remainder, so the ranges cover ``0..num_edges`` exactly.
    """
    if num_partitions <= 0:
        raise ValueError("num_partitions must be positive")
    if num_edges < 0:
        raise ValueError("num_edges must not be negative")
    per_partition = num_edges // num_partitions
    for partition in range(num_partitions):
        start = partition * per_partition
        if partition == num_partitions - 1:
            end = num_edges
        else:
            end = (partition + 1) * per_partition
        yield start, end