"""
StatusReporter -- point-in-time status snapshot of a sliced job.

Contract:
    ``build_status()`` returns a flat dict whose keys depend on the job state:

        queued                   queued_slices
        running/paused/failed    active_slices, failed_slices, queued_slices,
                                 est_remaining_duration (running, >= 5%)
        completed                records_per_hour
        any but completed        output_slices (when collecting output)

    ``base_status()`` renders the job's own attributes; it is merged under the
    computed fields, so on a key collision the computed value wins.

Invariants enforced:
    - The result never contains ``result``.
    - ``worker_name`` is absent iff ``sub_state`` is PROCESSING.
    - Nothing is divided by zero: no ETA below 5% or with zero elapsed time,
      no throughput with zero elapsed time.

Non-goals:
    - Consistency across the individual slice store queries.
"""

from __future__ import annotations

from dataclasses import fields
from datetime import datetime, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping
from uuid import UUID
from zoneinfo import ZoneInfo

from sliced_batch.domain.duration import seconds_as_duration
from sliced_batch.domain.progress import percent_complete
from sliced_batch.domain.types import BatchJob, JobState, SubState
from sliced_batch.domain.workers import worker_count

if TYPE_CHECKING:
    from sliced_batch.stores.base import SliceStore

MIN_PERCENT_FOR_ESTIMATE = 5

_ACTIVE_STATES = frozenset({JobState.RUNNING, JobState.PAUSED, JobState.FAILED})
_TIMESTAMP_FIELDS = ("created_at", "started_at", "completed_at")


def build_status(
    job: BatchJob,
    slice_store: SliceStore,
    base_status: Mapping[str, Any],
    now: datetime,
) -> dict[str, Any]:
    """Compose the status of ``job`` from slice counts and ``base_status``."""
    computed: dict[str, Any] = {}
    elapsed = job.elapsed_seconds(now)

    if job.state == JobState.QUEUED:
        computed["queued_slices"] = slice_store.input.queued_count()
    elif job.state in _ACTIVE_STATES:
        computed["active_slices"] = worker_count(job, slice_store, now)
        computed["failed_slices"] = slice_store.input.failed_count()
        computed["queued_slices"] = slice_store.input.queued_count()
        if job.is_running and job.has_record_count:
            remaining = _estimate_remaining_seconds(job, slice_store, elapsed)
            if remaining is not None:
                computed["est_remaining_duration"] = seconds_as_duration(remaining)
    elif job.state == JobState.COMPLETED:
        if job.has_record_count and elapsed > 0:
            computed["records_per_hour"] = _round_half_up(
                job.record_count / elapsed * 3600
            )

    if job.collects_output and not job.is_completed:
        computed["output_slices"] = slice_store.output.count()

    status = dict(base_status)
    status.update(computed)
    status.pop("result", None)
    if job.sub_state == SubState.PROCESSING:
        status.pop("worker_name", None)
    return status


def base_status(
    job: BatchJob,
    now: datetime,
    time_zone: str | tzinfo | None = None,
) -> dict[str, Any]:
    """Render every non-blank attribute of ``job`` plus status and duration.

    None, False, empty strings and empty containers are blank.  Timestamps are
    rendered as ISO-8601 in ``time_zone`` (UTC by default).
    """
    zone = resolve_time_zone(time_zone)
    status: dict[str, Any] = {}
    for f in fields(job):
        value = getattr(job, f.name)
        if _is_blank(value):
            continue
        if f.name in _TIMESTAMP_FIELDS:
            value = value.astimezone(zone).isoformat()
        elif isinstance(value, Enum):
            value = value.value
        elif isinstance(value, UUID):
            value = str(value)
        status[f.name] = value

    status["status"] = job.state.value
    status["duration"] = seconds_as_duration(job.elapsed_seconds(now))
    return status


def resolve_time_zone(time_zone: str | tzinfo | None) -> tzinfo:
    """Accept a tzinfo, an IANA zone name, or None for UTC."""
    if time_zone is None:
        return timezone.utc
    if isinstance(time_zone, tzinfo):
        return time_zone
    if time_zone.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(time_zone)


def _estimate_remaining_seconds(
    job: BatchJob, slice_store: SliceStore, elapsed: float,
) -> float | None:
    # Early estimates swing too much to be worth reporting
    percent = percent_complete(job, slice_store)
    if percent < MIN_PERCENT_FOR_ESTIMATE or elapsed <= 0:
        return None
    return elapsed / percent * 100 - elapsed


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _is_blank(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, dict, list, tuple, set)) and not value:
        return True
    return False
