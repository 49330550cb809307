"""
Typed exception hierarchy for sliced batch jobs.

Every error has a TYPED exception class, a machine-readable ``code`` class
attribute, and carries structured data as attributes rather than only a
message string.  Callers catch by type and report ``exc.code``:

    try:
        job = dispatcher.dispatch(request)
    except UploadValidationError as e:
        api_response(code=e.code, errors=e.errors)

Hierarchy:

    BatchKernelError (base)
    |
    +-- JobError
    |   +-- InvalidSliceSizeError
    |   +-- JobNotRestartableError
    |   +-- NaiveTimestampError
    |
    +-- SliceError
    |   +-- SliceNotFoundError
    |   +-- InvalidSliceTransitionError
    |
    +-- UploadError
    |   +-- JobClassNotRegisteredError
    |   +-- UploadValidationError
    |
    +-- ConfigurationError
        +-- UnknownJobSettingError

Progress reporting itself never raises: missing record counts, zero elapsed
time and inconsistent slice counts degrade to defaults.  Failures raised by
a slice store propagate to the caller untranslated.
"""

from __future__ import annotations

from typing import Any, Sequence


class BatchKernelError(Exception):
    """
    Base exception for all batch kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "BATCH_KERNEL_ERROR"


# Job-related exceptions


class JobError(BatchKernelError):
    """Base exception for job entity errors."""

    code: str = "JOB_ERROR"


class InvalidSliceSizeError(JobError):
    """slice_size must be a positive integer."""

    code: str = "INVALID_SLICE_SIZE"

    def __init__(self, slice_size: Any):
        self.slice_size = slice_size
        super().__init__(
            f"slice_size must be a positive integer, got {slice_size!r}"
        )


class JobNotRestartableError(JobError):
    """Job is still active and cannot be restarted."""

    code: str = "JOB_NOT_RESTARTABLE"

    def __init__(self, job_id: str, state: str):
        self.job_id = job_id
        self.state = state
        super().__init__(
            f"Job {job_id} cannot be restarted while in state '{state}'"
        )


class NaiveTimestampError(JobError):
    """Job timestamps must carry a time zone."""

    code: str = "NAIVE_TIMESTAMP"

    def __init__(self, field_name: str, value: Any):
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"{field_name} must be timezone-aware, got {value!r}"
        )


# Slice-related exceptions


class SliceError(BatchKernelError):
    """Base exception for slice store errors."""

    code: str = "SLICE_ERROR"


class SliceNotFoundError(SliceError):
    """Slice does not exist in the store."""

    code: str = "SLICE_NOT_FOUND"

    def __init__(self, slice_id: str):
        self.slice_id = slice_id
        super().__init__(f"Slice {slice_id} not found")


class InvalidSliceTransitionError(SliceError):
    """Slice cannot move from its current state to the requested one."""

    code: str = "INVALID_SLICE_TRANSITION"

    def __init__(self, slice_id: str, from_state: str, to_state: str):
        self.slice_id = slice_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Slice {slice_id} cannot transition from '{from_state}' to '{to_state}'"
        )


# Upload-related exceptions


class UploadError(BatchKernelError):
    """Base exception for upload dispatch errors."""

    code: str = "UPLOAD_ERROR"


class JobClassNotRegisteredError(UploadError):
    """No job class is registered under the requested name."""

    code: str = "JOB_CLASS_NOT_REGISTERED"

    def __init__(self, job_class_name: str, available: Sequence[str] = ()):
        self.job_class_name = job_class_name
        self.available = tuple(available)
        super().__init__(
            f"Job class '{job_class_name}' is not registered. "
            f"Available: {list(self.available)}"
        )


class UploadValidationError(UploadError):
    """Upload request failed validation."""

    code: str = "UPLOAD_VALIDATION_FAILED"

    def __init__(self, errors: Sequence[str]):
        self.errors = tuple(errors)
        super().__init__(
            f"Upload request is invalid: {'; '.join(self.errors)}"
        )


# Configuration-related exceptions


class ConfigurationError(BatchKernelError):
    """Configuration document is invalid."""

    code: str = "CONFIGURATION_ERROR"


class UnknownJobSettingError(ConfigurationError):
    """Configuration names a job setting that does not exist."""

    code: str = "UNKNOWN_JOB_SETTING"

    def __init__(self, setting: str, section: str):
        self.setting = setting
        self.section = section
        super().__init__(f"Unknown job setting '{setting}' in '{section}'")
