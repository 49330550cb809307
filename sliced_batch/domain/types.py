"""
sliced_batch.domain.types -- Job entity, slice DTOs and lifecycle enums.

ZERO I/O.

``BatchJob`` is the one mutable type here: its ``state`` and ``sub_state``
are advanced by the external scheduler while reporting code reads them.  It
compares by identity so it can key the per-job worker-count cache.

``Slice`` is a frozen snapshot of one unit of work as reported by a
slice store.

Invariants enforced:
    - ``slice_size`` is a positive integer at construction and on every
      later assignment (InvalidSliceSizeError otherwise).
    - ``created_at``, ``started_at`` and ``completed_at`` are None or
      timezone-aware (NaiveTimestampError otherwise), so elapsed-time
      arithmetic never mixes naive and aware values.
    - ``collects_nil_output`` is true only when ``collects_output`` is true.
    - A flag reader is true only when the stored value is exactly ``True``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from batch_kernel.exceptions import InvalidSliceSizeError, NaiveTimestampError


# =============================================================================
# Status enums
# =============================================================================


class JobState(str, Enum):
    """Job-level lifecycle state, owned by the external scheduler."""

    QUEUED = "queued"
    RUNNING = "running"
    PAUSED = "paused"
    FAILED = "failed"
    COMPLETED = "completed"
    ABORTED = "aborted"


class SubState(str, Enum):
    """Phase within RUNNING: before -> processing -> after -> complete."""

    NONE = "none"
    BEFORE = "before"  # Job's own pre-hook, single worker
    PROCESSING = "processing"  # Slices processed by many workers
    AFTER = "after"  # Job's own post-hook, single worker
    COMPLETE = "complete"


class SliceState(str, Enum):
    """Per-slice lifecycle state within a slice store."""

    QUEUED = "queued"
    RUNNING = "running"
    FAILED = "failed"
    COMPLETED = "completed"


class SliceCategoryName(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


# =============================================================================
# Job entity
# =============================================================================

DEFAULT_SLICE_SIZE = 100


def _check_slice_size(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidSliceSizeError(value)


_TIMESTAMP_FIELDS = frozenset({"created_at", "started_at", "completed_at"})


def _check_timestamp(name: str, value: Any) -> None:
    if value is None:
        return
    if not isinstance(value, datetime) or value.utcoffset() is None:
        raise NaiveTimestampError(name, value)


@dataclass(eq=False)
class BatchJob:
    """A job whose records are split into independently processed slices.

    ``record_count`` is None until the upload path knows the final total;
    slices may already be processed while more are still being appended.
    """

    job_id: UUID = field(default_factory=uuid4)
    job_class_name: str = "BatchJob"
    description: str | None = None
    priority: int = 50
    state: JobState = JobState.QUEUED
    sub_state: SubState = SubState.NONE
    slice_size: int = DEFAULT_SLICE_SIZE
    record_count: int | None = None
    collect_output: bool = False
    collect_nil_output: bool = True
    compress: bool = False
    encrypt: bool = False
    upload_file_name: str | None = None
    full_file_name: str | None = None
    worker_name: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    result: dict[str, Any] | None = None
    failure_message: str | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "slice_size":
            _check_slice_size(value)
        elif name in _TIMESTAMP_FIELDS:
            _check_timestamp(name, value)
        super().__setattr__(name, value)

    # -------------------------------------------------------------------------
    # Flag readers
    # -------------------------------------------------------------------------

    @property
    def encrypted(self) -> bool:
        """Whether the slices for this job are encrypted."""
        return self.encrypt is True

    @property
    def compressed(self) -> bool:
        """Whether the slices for this job are compressed."""
        return self.compress is True

    @property
    def collects_output(self) -> bool:
        """Whether to store the results from processing slices."""
        return self.collect_output is True

    @property
    def collects_nil_output(self) -> bool:
        """Whether to keep None results; only meaningful when collecting output."""
        return self.collects_output and self.collect_nil_output is True

    # -------------------------------------------------------------------------
    # State readers
    # -------------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.state == JobState.RUNNING

    @property
    def is_completed(self) -> bool:
        return self.state == JobState.COMPLETED

    @property
    def has_record_count(self) -> bool:
        """True once a positive record count is known."""
        return self.record_count is not None and self.record_count > 0

    def elapsed_seconds(self, now: datetime) -> float:
        """Seconds spent running: up to completion, or up to ``now``."""
        if self.started_at is None:
            return 0.0
        end = self.completed_at or now
        return max((end - self.started_at).total_seconds(), 0.0)


def job_field_names() -> tuple[str, ...]:
    """All BatchJob field names, in declaration order."""
    return tuple(f.name for f in fields(BatchJob))


# Fields a user or job class may configure when creating a job.
CONFIGURABLE_FIELDS: tuple[str, ...] = (
    "description",
    "priority",
    "slice_size",
    "collect_output",
    "collect_nil_output",
    "compress",
    "encrypt",
)


# =============================================================================
# Slice DTO
# =============================================================================


@dataclass(frozen=True)
class Slice:
    """Immutable snapshot of one slice as reported by a slice store."""

    slice_id: UUID
    job_id: UUID
    category: SliceCategoryName
    state: SliceState
    slice_index: int = 0
    record_count: int = 0
    worker_name: str | None = None
    failure_count: int = 0
    failure_message: str | None = None
    records: tuple[Any, ...] = ()
