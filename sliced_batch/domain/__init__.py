"""
sliced_batch.domain -- Job entity, slice DTOs and pure progress derivations.

ZERO I/O of its own: every derivation reads a slice store it is handed.
"""

from sliced_batch.domain.duration import seconds_as_duration
from sliced_batch.domain.progress import percent_complete
from sliced_batch.domain.restart import COPY_ON_RESTART, restart_job
from sliced_batch.domain.types import (
    BatchJob,
    JobState,
    Slice,
    SliceCategoryName,
    SliceState,
    SubState,
)
from sliced_batch.domain.workers import WorkerCountCache, worker_count, worker_names

__all__ = [
    "BatchJob",
    "COPY_ON_RESTART",
    "JobState",
    "Slice",
    "SliceCategoryName",
    "SliceState",
    "SubState",
    "WorkerCountCache",
    "percent_complete",
    "restart_job",
    "seconds_as_duration",
    "worker_count",
    "worker_names",
]
