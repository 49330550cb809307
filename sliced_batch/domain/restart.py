"""
Restarting a finished job as a fresh queued job.

Configuration is inherited in two layers: fields in ``COPY_ON_RESTART`` are
carried forward from the old job, every other configurable field is reset to
the job class settings.  Runtime fields (state, counts, run timestamps, worker
and result) always start empty; ``created_at`` is the restart time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from batch_kernel.domain.clock import Clock, SystemClock
from batch_kernel.exceptions import JobNotRestartableError

from sliced_batch.domain.types import CONFIGURABLE_FIELDS, BatchJob, JobState

if TYPE_CHECKING:
    from batch_config.schema import JobSettings

COPY_ON_RESTART: tuple[str, ...] = (
    "job_class_name",
    "description",
    "priority",
    "slice_size",
    "upload_file_name",
    "full_file_name",
)

RESTARTABLE_STATES = frozenset(
    {JobState.FAILED, JobState.ABORTED, JobState.COMPLETED}
)


def restart_job(
    job: BatchJob,
    settings: JobSettings,
    clock: Clock | None = None,
) -> BatchJob:
    """Return a new QUEUED job configured from ``job`` and ``settings``.

    The new job is stamped ``created_at`` from ``clock``.

    Raises:
        JobNotRestartableError: If the job is queued, running or paused.
    """
    if job.state not in RESTARTABLE_STATES:
        raise JobNotRestartableError(str(job.job_id), job.state.value)

    values = {name: getattr(settings, name) for name in CONFIGURABLE_FIELDS}
    values.update({name: getattr(job, name) for name in COPY_ON_RESTART})
    values["created_at"] = (clock or SystemClock()).now()
    return BatchJob(**values)
