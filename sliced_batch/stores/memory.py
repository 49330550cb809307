"""
InMemorySliceStore -- thread-safe reference slice store.

Contract:
    Implements the ``SliceStore`` read protocol for one job, plus the
    scheduler/worker side mutators that move slices through their lifecycle:

        upload -> QUEUED --claim--> RUNNING --complete--> (removed)
                                       |
                                       +--fail--> FAILED --retry--> QUEUED

    Completing an input slice removes it from the input category.  When the
    job collects output, the slice's result is stored as an output slice
    (a None result only when the job also collects nil output).

Concurrency:
    One lock guards both categories.  Reads take a snapshot under the lock,
    so readers never see a half-applied transition.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from itertools import islice
from typing import Any, Iterable, Iterator
from uuid import UUID, uuid4

from batch_kernel.exceptions import InvalidSliceTransitionError, SliceNotFoundError
from batch_kernel.logging_config import get_logger

from sliced_batch.domain.types import (
    BatchJob,
    Slice,
    SliceCategoryName,
    SliceState,
)

logger = get_logger("batch.stores.memory")


class InMemorySliceCategory:
    """Read view over one category of an ``InMemorySliceStore``."""

    def __init__(self, store: InMemorySliceStore, category: SliceCategoryName):
        self._store = store
        self._category = category

    def count(self) -> int:
        return len(self._store._snapshot(self._category))

    def queued_count(self) -> int:
        return self._count_state(SliceState.QUEUED)

    def running_count(self) -> int:
        return self._count_state(SliceState.RUNNING)

    def failed_count(self) -> int:
        return self._count_state(SliceState.FAILED)

    def running_slices(self) -> list[Slice]:
        return [
            s for s in self._store._snapshot(self._category)
            if s.state == SliceState.RUNNING
        ]

    def __iter__(self) -> Iterator[Slice]:
        return iter(self._store._snapshot(self._category))

    def _count_state(self, state: SliceState) -> int:
        return sum(
            1 for s in self._store._snapshot(self._category) if s.state == state
        )


class InMemorySliceStore:
    """Slice store for a single job, held in process memory."""

    def __init__(self, job: BatchJob):
        self._job = job
        self._lock = threading.Lock()
        self._slices: dict[SliceCategoryName, dict[UUID, Slice]] = {
            SliceCategoryName.INPUT: {},
            SliceCategoryName.OUTPUT: {},
        }
        self._next_index = {
            SliceCategoryName.INPUT: 0,
            SliceCategoryName.OUTPUT: 0,
        }
        self._input = InMemorySliceCategory(self, SliceCategoryName.INPUT)
        self._output = InMemorySliceCategory(self, SliceCategoryName.OUTPUT)

    @property
    def input(self) -> InMemorySliceCategory:
        return self._input

    @property
    def output(self) -> InMemorySliceCategory:
        return self._output

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    def upload(self, records: Iterable[Any], slice_size: int | None = None) -> int:
        """Split ``records`` into QUEUED input slices.

        Returns the number of records uploaded.  Setting the job's
        ``record_count`` is left to the caller.
        """
        size = slice_size or self._job.slice_size
        iterator = iter(records)
        total = 0
        while True:
            chunk = tuple(islice(iterator, size))
            if not chunk:
                break
            self.add_slice(records=chunk)
            total += len(chunk)

        logger.info(
            "records_uploaded",
            extra={
                "job_id": str(self._job.job_id),
                "record_count": total,
                "slice_size": size,
            },
        )
        return total

    def add_slice(
        self,
        records: Iterable[Any] = (),
        state: SliceState = SliceState.QUEUED,
        category: SliceCategoryName = SliceCategoryName.INPUT,
        worker_name: str | None = None,
    ) -> Slice:
        """Append a slice to a category and return it."""
        records = tuple(records)
        with self._lock:
            index = self._next_index[category]
            self._next_index[category] = index + 1
            new_slice = Slice(
                slice_id=uuid4(),
                job_id=self._job.job_id,
                category=category,
                state=state,
                slice_index=index,
                record_count=len(records),
                worker_name=worker_name,
                records=records,
            )
            self._slices[category][new_slice.slice_id] = new_slice
        return new_slice

    # -------------------------------------------------------------------------
    # Slice lifecycle
    # -------------------------------------------------------------------------

    def claim(self, worker_name: str) -> Slice | None:
        """Move the first QUEUED input slice to RUNNING for ``worker_name``."""
        with self._lock:
            for current in self._slices[SliceCategoryName.INPUT].values():
                if current.state == SliceState.QUEUED:
                    claimed = replace(
                        current, state=SliceState.RUNNING, worker_name=worker_name,
                    )
                    self._slices[SliceCategoryName.INPUT][current.slice_id] = claimed
                    return claimed
        return None

    def complete(self, slice_id: UUID, output: Any = None) -> None:
        """Finish a RUNNING input slice, collecting its output when enabled."""
        with self._lock:
            current = self._get_input(slice_id)
            self._check_transition(current, SliceState.RUNNING, SliceState.COMPLETED)
            del self._slices[SliceCategoryName.INPUT][slice_id]

        if not self._job.collects_output:
            return
        if output is None and not self._job.collects_nil_output:
            return
        self.add_slice(
            records=(output,),
            state=SliceState.COMPLETED,
            category=SliceCategoryName.OUTPUT,
            worker_name=current.worker_name,
        )

    def fail(self, slice_id: UUID, message: str) -> Slice:
        """Mark a RUNNING input slice as FAILED."""
        with self._lock:
            current = self._get_input(slice_id)
            self._check_transition(current, SliceState.RUNNING, SliceState.FAILED)
            failed = replace(
                current,
                state=SliceState.FAILED,
                failure_count=current.failure_count + 1,
                failure_message=message,
            )
            self._slices[SliceCategoryName.INPUT][slice_id] = failed
        logger.warning(
            "slice_failed",
            extra={
                "job_id": str(self._job.job_id),
                "slice_id": str(slice_id),
                "worker_name": current.worker_name,
                "failure_count": failed.failure_count,
            },
        )
        return failed

    def retry(self, slice_id: UUID) -> Slice:
        """Requeue a FAILED input slice."""
        with self._lock:
            current = self._get_input(slice_id)
            self._check_transition(current, SliceState.FAILED, SliceState.QUEUED)
            queued = replace(current, state=SliceState.QUEUED, worker_name=None)
            self._slices[SliceCategoryName.INPUT][slice_id] = queued
        return queued

    def retry_failed(self) -> int:
        """Requeue every FAILED input slice; returns how many were requeued."""
        with self._lock:
            failed_ids = [
                s.slice_id for s in self._slices[SliceCategoryName.INPUT].values()
                if s.state == SliceState.FAILED
            ]
        for slice_id in failed_ids:
            self.retry(slice_id)
        return len(failed_ids)

    def requeue_running(self, worker_name: str) -> int:
        """Return slices held by a lost worker to the queue."""
        requeued = 0
        with self._lock:
            slices = self._slices[SliceCategoryName.INPUT]
            for slice_id, current in list(slices.items()):
                if current.state == SliceState.RUNNING and current.worker_name == worker_name:
                    slices[slice_id] = replace(
                        current, state=SliceState.QUEUED, worker_name=None,
                    )
                    requeued += 1
        if requeued:
            logger.warning(
                "slices_requeued",
                extra={
                    "job_id": str(self._job.job_id),
                    "lost_worker": worker_name,
                    "requeued": requeued,
                },
            )
        return requeued

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _snapshot(self, category: SliceCategoryName) -> tuple[Slice, ...]:
        with self._lock:
            return tuple(self._slices[category].values())

    def _get_input(self, slice_id: UUID) -> Slice:
        try:
            return self._slices[SliceCategoryName.INPUT][slice_id]
        except KeyError:
            raise SliceNotFoundError(str(slice_id)) from None

    @staticmethod
    def _check_transition(
        current: Slice, expected: SliceState, target: SliceState,
    ) -> None:
        if current.state != expected:
            raise InvalidSliceTransitionError(
                str(current.slice_id), current.state.value, target.value,
            )
