"""
Worker count and worker names for a job.

Contract:
    ``worker_count()`` reports how many workers are active on a job and is
    memoized per job instance for one wall-clock second, so however often a
    dashboard polls, a slice store sees at most one running-count query per
    job per second.
    ``worker_names()`` reports which workers those are.

Invariants enforced:
    - A job that is not RUNNING has no workers and never hits the store.
    - BEFORE/AFTER run the job's own hook on a single worker.
    - PROCESSING counts the input slices the store reports as running.

Concurrency:
    Each job's ``WorkerCountCache`` is a lock-guarded ``(value, second)``
    snapshot.  The store is queried outside the lock; two threads missing the
    cache in the same second both query and the last write wins.  A reader
    never observes a value paired with the wrong second.
"""

from __future__ import annotations

import threading
import weakref
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from batch_kernel.logging_config import get_logger

from sliced_batch.domain.types import BatchJob, SubState

if TYPE_CHECKING:
    from sliced_batch.stores.base import SliceStore

logger = get_logger("batch.workers")

_SINGLE_WORKER_PHASES = (SubState.BEFORE, SubState.AFTER)


@dataclass(frozen=True)
class _CountSnapshot:
    value: int
    computed_second: int


class WorkerCountCache:
    """Value holder for the last computed worker count of one job."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: _CountSnapshot | None = None

    def get(self, second: int) -> int | None:
        """Cached value if it was computed during ``second``, else None."""
        with self._lock:
            snapshot = self._snapshot
        if snapshot is not None and snapshot.computed_second == second:
            return snapshot.value
        return None

    def put(self, value: int, second: int) -> None:
        with self._lock:
            self._snapshot = _CountSnapshot(value=value, computed_second=second)


_caches: weakref.WeakKeyDictionary[BatchJob, WorkerCountCache] = (
    weakref.WeakKeyDictionary()
)
_caches_lock = threading.Lock()


def worker_count_cache(job: BatchJob) -> WorkerCountCache:
    """Return the cache owned by ``job``, creating it on first use."""
    with _caches_lock:
        cache = _caches.get(job)
        if cache is None:
            cache = WorkerCountCache()
            _caches[job] = cache
        return cache


def worker_count(job: BatchJob, slice_store: SliceStore, now: datetime) -> int:
    """Return the number of workers currently working on this job."""
    if not job.is_running:
        return 0

    second = int(now.timestamp())
    cache = worker_count_cache(job)
    cached = cache.get(second)
    if cached is not None:
        return cached

    if job.sub_state in _SINGLE_WORKER_PHASES:
        count = 1
    elif job.sub_state == SubState.PROCESSING:
        count = slice_store.input.running_count()
    else:
        count = 0

    cache.put(count, second)
    logger.debug(
        "worker_count_refreshed",
        extra={
            "job_id": str(job.job_id),
            "sub_state": job.sub_state.value,
            "worker_count": count,
        },
    )
    return count


def worker_names(job: BatchJob, slice_store: SliceStore) -> list[str | None]:
    """Return the names of workers currently working on this job.

    While processing, names come from the running input slices in store
    order; a worker holding several slices appears once per slice.
    """
    if not job.is_running:
        return []

    if job.sub_state in _SINGLE_WORKER_PHASES:
        return [job.worker_name]
    if job.sub_state == SubState.PROCESSING:
        return [s.worker_name for s in slice_store.input.running_slices()]
    return []
