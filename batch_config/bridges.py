"""
Bridges from configuration to runtime job entities.

``job_from_properties`` is how a job class's configured defaults and a
caller's properties become a ``BatchJob``: class settings first, then the
properties on top.
"""

from __future__ import annotations

from typing import Any, Mapping
from uuid import UUID

from batch_kernel.domain.clock import Clock, SystemClock
from batch_kernel.exceptions import UnknownJobSettingError

from batch_config.schema import BatchConfiguration
from sliced_batch.domain.types import CONFIGURABLE_FIELDS, BatchJob

# Properties a caller may set when creating a job.
JOB_PROPERTY_NAMES: frozenset[str] = frozenset(CONFIGURABLE_FIELDS) | {
    "upload_file_name",
    "full_file_name",
}


def job_from_properties(
    job_class_name: str,
    properties: Mapping[str, Any],
    config: BatchConfiguration,
    job_id: UUID | None = None,
    clock: Clock | None = None,
) -> BatchJob:
    """Create a QUEUED job of ``job_class_name`` from settings and properties.

    Raises:
        UnknownJobSettingError: if a property is not a settable job field.
        InvalidSliceSizeError: if the resulting slice_size is not positive.
    """
    for name in properties:
        if name not in JOB_PROPERTY_NAMES:
            raise UnknownJobSettingError(name, "properties")

    values: dict[str, Any] = config.settings_for(job_class_name).as_dict()
    values.update(properties)
    values["job_class_name"] = job_class_name
    values["created_at"] = (clock or SystemClock()).now()
    if job_id is not None:
        values["job_id"] = job_id
    return BatchJob(**values)
