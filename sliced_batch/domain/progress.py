"""
Percent-complete estimation from slice counts.

Contract:
    ``percent_complete()`` turns the number of still-queued input slices into
    an integer percentage of the job's expected ``record_count``.

Invariants enforced:
    - 100 is reported only for a COMPLETED job.
    - An unknown record count (None or <= 0) reports 0.
    - Any other job reports a value in [0, 99].

Every queued slice is assumed to be full (``slice_size`` records).  When that
assumption overshoots ``record_count`` the result is clamped to 99 instead of
going negative.  An empty queue also reports 99 until the job is COMPLETED:
slices may still be running, or more may still be uploaded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from batch_kernel.logging_config import get_logger

from sliced_batch.domain.types import BatchJob

if TYPE_CHECKING:
    from sliced_batch.stores.base import SliceStore

logger = get_logger("batch.progress")

MAX_INCOMPLETE_PERCENT = 99


def percent_complete(job: BatchJob, slice_store: SliceStore) -> int:
    """Return the approximate percent of records completed so far."""
    if job.is_completed:
        return 100
    if not job.has_record_count:
        return 0

    record_count = job.record_count
    estimate = slice_store.input.queued_count() * job.slice_size
    if estimate > record_count:
        logger.debug(
            "percent_complete_clamped",
            extra={
                "job_id": str(job.job_id),
                "estimated_records": estimate,
                "record_count": record_count,
            },
        )
        return MAX_INCOMPLETE_PERCENT

    # floor((1 - estimate / record_count) * 100) without float rounding
    percent = (record_count - estimate) * 100 // record_count
    return min(percent, MAX_INCOMPLETE_PERCENT)
