"""
SqlSliceStore -- slice store backed by the ``batch_slices`` table.

Contract:
    Implements the ``SliceStore`` read protocol with one ``COUNT(*)`` query
    per call, plus the worker-side mutators ``upload``, ``claim``,
    ``complete``, ``fail``, ``retry``, ``retry_failed`` and
    ``requeue_running``, matching the in-memory store.

Non-goals:
    - Does NOT call ``session.commit()`` -- caller controls boundaries.
    - Does NOT take a consistent snapshot across count queries.
"""

from __future__ import annotations

from itertools import islice
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from batch_kernel.exceptions import InvalidSliceTransitionError, SliceNotFoundError
from batch_kernel.logging_config import get_logger

from sliced_batch.domain.types import (
    BatchJob,
    Slice,
    SliceCategoryName,
    SliceState,
)
from sliced_batch.models.slice import SliceModel

logger = get_logger("batch.stores.sql")


class SqlSliceCategory:
    """Count queries over one category of one job's slices."""

    def __init__(self, session: Session, job_id: UUID, category: SliceCategoryName):
        self._session = session
        self._job_id = job_id
        self._category = category

    def count(self) -> int:
        return self._count()

    def queued_count(self) -> int:
        return self._count(SliceState.QUEUED)

    def running_count(self) -> int:
        return self._count(SliceState.RUNNING)

    def failed_count(self) -> int:
        return self._count(SliceState.FAILED)

    def running_slices(self) -> list[Slice]:
        models = self._session.execute(
            select(SliceModel)
            .where(
                SliceModel.job_id == self._job_id,
                SliceModel.category == self._category.value,
                SliceModel.state == SliceState.RUNNING.value,
            )
            .order_by(SliceModel.slice_index)
        ).scalars().all()
        return [m.to_dto() for m in models]

    def _count(self, state: SliceState | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(SliceModel)
            .where(
                SliceModel.job_id == self._job_id,
                SliceModel.category == self._category.value,
            )
        )
        if state is not None:
            stmt = stmt.where(SliceModel.state == state.value)
        return self._session.execute(stmt).scalar_one()


class SqlSliceStore:
    """Slice store for a single job, persisted through a SQLAlchemy session."""

    def __init__(self, session: Session, job: BatchJob):
        self._session = session
        self._job = job
        self._input = SqlSliceCategory(session, job.job_id, SliceCategoryName.INPUT)
        self._output = SqlSliceCategory(session, job.job_id, SliceCategoryName.OUTPUT)

    @property
    def input(self) -> SqlSliceCategory:
        return self._input

    @property
    def output(self) -> SqlSliceCategory:
        return self._output

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    def upload(self, records: Iterable[Any], slice_size: int | None = None) -> int:
        """Split ``records`` into QUEUED input slices; returns the record count."""
        size = slice_size or self._job.slice_size
        index = self._next_index(SliceCategoryName.INPUT)
        iterator = iter(records)
        total = 0
        while True:
            chunk = list(islice(iterator, size))
            if not chunk:
                break
            self._session.add(
                SliceModel(
                    job_id=self._job.job_id,
                    category=SliceCategoryName.INPUT.value,
                    slice_index=index,
                    state=SliceState.QUEUED.value,
                    record_count=len(chunk),
                    records=chunk,
                )
            )
            index += 1
            total += len(chunk)
        self._session.flush()

        logger.info(
            "records_uploaded",
            extra={
                "job_id": str(self._job.job_id),
                "record_count": total,
                "slice_size": size,
            },
        )
        return total

    # -------------------------------------------------------------------------
    # Slice lifecycle
    # -------------------------------------------------------------------------

    def claim(self, worker_name: str) -> Slice | None:
        """Lock the first QUEUED input slice and assign it to ``worker_name``."""
        model = self._session.execute(
            select(SliceModel)
            .where(
                SliceModel.job_id == self._job.job_id,
                SliceModel.category == SliceCategoryName.INPUT.value,
                SliceModel.state == SliceState.QUEUED.value,
            )
            .order_by(SliceModel.slice_index)
            .limit(1)
            .with_for_update(skip_locked=True)
        ).scalar_one_or_none()

        if model is None:
            return None

        model.state = SliceState.RUNNING.value
        model.worker_name = worker_name
        self._session.flush()
        return model.to_dto()

    def complete(self, slice_id: UUID, output: Any = None) -> None:
        """Delete a RUNNING input slice, collecting its output when enabled."""
        model = self._get_input(slice_id)
        self._check_transition(model, SliceState.RUNNING, SliceState.COMPLETED)
        worker_name = model.worker_name
        self._session.delete(model)

        collect = self._job.collects_output and (
            output is not None or self._job.collects_nil_output
        )
        if collect:
            self._session.add(
                SliceModel(
                    job_id=self._job.job_id,
                    category=SliceCategoryName.OUTPUT.value,
                    slice_index=self._next_index(SliceCategoryName.OUTPUT),
                    state=SliceState.COMPLETED.value,
                    record_count=1,
                    worker_name=worker_name,
                    records=[output],
                )
            )
        self._session.flush()

    def fail(self, slice_id: UUID, message: str) -> Slice:
        """Mark a RUNNING input slice as FAILED."""
        model = self._get_input(slice_id)
        self._check_transition(model, SliceState.RUNNING, SliceState.FAILED)
        model.state = SliceState.FAILED.value
        model.failure_count = model.failure_count + 1
        model.failure_message = message
        self._session.flush()
        return model.to_dto()

    def retry(self, slice_id: UUID) -> Slice:
        """Requeue a FAILED input slice."""
        model = self._get_input(slice_id)
        self._check_transition(model, SliceState.FAILED, SliceState.QUEUED)
        model.state = SliceState.QUEUED.value
        model.worker_name = None
        self._session.flush()
        return model.to_dto()

    def retry_failed(self) -> int:
        """Requeue every FAILED input slice; returns how many were requeued."""
        result = self._session.execute(
            update(SliceModel)
            .where(
                SliceModel.job_id == self._job.job_id,
                SliceModel.category == SliceCategoryName.INPUT.value,
                SliceModel.state == SliceState.FAILED.value,
            )
            .values(state=SliceState.QUEUED.value, worker_name=None)
        )
        self._session.flush()
        return result.rowcount

    def requeue_running(self, worker_name: str) -> int:
        """Return slices held by a lost worker to the queue."""
        result = self._session.execute(
            update(SliceModel)
            .where(
                SliceModel.job_id == self._job.job_id,
                SliceModel.category == SliceCategoryName.INPUT.value,
                SliceModel.state == SliceState.RUNNING.value,
                SliceModel.worker_name == worker_name,
            )
            .values(state=SliceState.QUEUED.value, worker_name=None)
        )
        self._session.flush()
        if result.rowcount:
            logger.warning(
                "slices_requeued",
                extra={
                    "job_id": str(self._job.job_id),
                    "lost_worker": worker_name,
                    "requeued": result.rowcount,
                },
            )
        return result.rowcount

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _next_index(self, category: SliceCategoryName) -> int:
        current = self._session.execute(
            select(func.max(SliceModel.slice_index)).where(
                SliceModel.job_id == self._job.job_id,
                SliceModel.category == category.value,
            )
        ).scalar_one()
        return 0 if current is None else current + 1

    def _get_input(self, slice_id: UUID) -> SliceModel:
        model = self._session.get(SliceModel, slice_id)
        if model is None or model.category != SliceCategoryName.INPUT.value:
            raise SliceNotFoundError(str(slice_id))
        return model

    @staticmethod
    def _check_transition(
        model: SliceModel, expected: SliceState, target: SliceState,
    ) -> None:
        if model.state != expected.value:
            raise InvalidSliceTransitionError(
                str(model.id), model.state, target.value,
            )
