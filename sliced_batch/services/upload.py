"""
Upload dispatch -- creates a job of a registered class and feeds it a file.

Contract:
    ``JobClassRegistry`` maps job class names to ``JobClassDefinition``s.
    Each definition declares its ``UploadCapability`` once, at registration:

        UPLOAD            the class's uploader slices the file into the
                          job's store (and sets ``record_count``)
        UPLOAD_FILE_NAME  the file name is assigned to the job, to be read
                          later by the job itself
        FULL_FILE_NAME    the file name is assigned to the job's
                          ``full_file_name`` instead

    ``UploadFileDispatcher.dispatch()`` validates a request, builds the job
    from configuration plus the request properties, and runs the upload.

Failure modes:
    - ``UploadValidationError`` -- every validation message at once.
    - Uploader exceptions propagate after the class's ``cleanup`` hook has
      discarded any partial upload.
    - A failing ``cleanup`` hook is logged; the uploader's exception is the
      one that propagates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable
from urllib.parse import urlparse
from uuid import UUID

from batch_kernel.domain.clock import Clock, SystemClock
from batch_kernel.exceptions import JobClassNotRegisteredError, UploadValidationError
from batch_kernel.logging_config import LogContext, get_logger

from batch_config.bridges import JOB_PROPERTY_NAMES, job_from_properties
from batch_config.schema import BatchConfiguration
from sliced_batch.domain.types import BatchJob

logger = get_logger("batch.upload")

Uploader = Callable[[BatchJob, str, str | None], None]
Cleanup = Callable[[BatchJob], None]


class UploadCapability(str, Enum):
    """How a job class accepts an uploaded file."""

    UPLOAD = "upload"
    UPLOAD_FILE_NAME = "upload_file_name"
    FULL_FILE_NAME = "full_file_name"


@dataclass(frozen=True)
class JobClassDefinition:
    """A job class that files can be uploaded into."""

    name: str
    capability: UploadCapability
    uploader: Uploader | None = None
    cleanup: Cleanup | None = None


@dataclass(frozen=True)
class UploadFileRequest:
    """Request to create a job of ``job_class_name`` and upload a file into it."""

    job_class_name: str
    upload_file_name: str
    original_file_name: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    job_id: UUID | None = None


class JobClassRegistry:
    """Registry mapping job class names to their definitions.

    Contract:
        - ``register()`` adds a definition; raises ValueError on a duplicate
          name or an UPLOAD class without an uploader.
        - ``get()`` raises JobClassNotRegisteredError if missing.
    """

    def __init__(self) -> None:
        self._classes: dict[str, JobClassDefinition] = {}

    def register(self, definition: JobClassDefinition) -> None:
        if definition.name in self._classes:
            raise ValueError(
                f"Job class '{definition.name}' is already registered"
            )
        if definition.capability == UploadCapability.UPLOAD and definition.uploader is None:
            raise ValueError(
                f"Job class '{definition.name}' declares UPLOAD without an uploader"
            )
        self._classes[definition.name] = definition

    def get(self, job_class_name: str) -> JobClassDefinition:
        try:
            return self._classes[job_class_name]
        except KeyError:
            raise JobClassNotRegisteredError(
                job_class_name, self.list_classes(),
            ) from None

    def list_classes(self) -> tuple[str, ...]:
        """Return all registered job class names, sorted."""
        return tuple(sorted(self._classes))

    def __len__(self) -> int:
        return len(self._classes)

    def __contains__(self, job_class_name: str) -> bool:
        return job_class_name in self._classes


class UploadFileDispatcher:
    """Validates upload requests and dispatches them into new jobs."""

    def __init__(
        self,
        registry: JobClassRegistry,
        config: BatchConfiguration,
        clock: Clock | None = None,
    ):
        self._registry = registry
        self._config = config
        self._clock = clock or SystemClock()

    def validate(self, request: UploadFileRequest) -> tuple[str, ...]:
        """Return every validation message for ``request`` (empty when valid)."""
        errors: list[str] = []

        file_name = request.upload_file_name or ""
        if not file_name.strip():
            errors.append("Upload file name can't be blank.")
        elif not _local_file_exists(file_name):
            errors.append(f"Upload file: {file_name} does not exist.")

        if request.job_class_name not in self._registry:
            errors.append(
                f"Job class {request.job_class_name!r} is not registered"
            )

        for name in request.properties:
            if name not in JOB_PROPERTY_NAMES:
                errors.append(
                    f"Unknown Property: Attempted to set a value for {name!r} "
                    f"which is not allowed on the job {request.job_class_name}"
                )

        return tuple(errors)

    def dispatch(self, request: UploadFileRequest) -> BatchJob:
        """Create the job and upload the file into it.

        Raises:
            UploadValidationError: If the request is invalid.
        """
        errors = self.validate(request)
        if errors:
            raise UploadValidationError(errors)

        definition = self._registry.get(request.job_class_name)
        job = job_from_properties(
            request.job_class_name,
            request.properties,
            self._config,
            job_id=request.job_id,
            clock=self._clock,
        )

        with LogContext.bind(
            job_id=str(job.job_id), job_class_name=job.job_class_name,
        ):
            try:
                if definition.capability == UploadCapability.UPLOAD:
                    job.upload_file_name = (
                        request.original_file_name or request.upload_file_name
                    )
                    definition.uploader(
                        job, request.upload_file_name, request.original_file_name,
                    )
                elif definition.capability == UploadCapability.UPLOAD_FILE_NAME:
                    job.upload_file_name = request.upload_file_name
                else:
                    job.full_file_name = request.upload_file_name
            except Exception:
                logger.exception(
                    "upload_failed",
                    extra={"upload_file_name": request.upload_file_name},
                )
                if definition.cleanup is not None:
                    try:
                        definition.cleanup(job)
                    except Exception:
                        logger.exception("upload_cleanup_failed")
                raise

            logger.info(
                "upload_dispatched",
                extra={
                    "upload_file_name": request.upload_file_name,
                    "capability": definition.capability.value,
                    "record_count": job.record_count,
                },
            )
        return job


def _local_file_exists(file_name: str) -> bool:
    """True for existing local files and for any remote URI (not checked)."""
    parsed = urlparse(file_name)
    if parsed.scheme == "file":
        return Path(parsed.path).exists()
    # Single letter schemes are Windows drive letters
    if parsed.scheme and len(parsed.scheme) > 1:
        return True
    return Path(file_name).exists()
