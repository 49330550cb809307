"""
sliced_batch.services -- status reporting, monitoring and upload dispatch.
"""

from sliced_batch.services.monitor import SlicedJobMonitor
from sliced_batch.services.status_reporter import base_status, build_status
from sliced_batch.services.upload import (
    JobClassDefinition,
    JobClassRegistry,
    UploadCapability,
    UploadFileDispatcher,
    UploadFileRequest,
)

__all__ = [
    "JobClassDefinition",
    "JobClassRegistry",
    "SlicedJobMonitor",
    "UploadCapability",
    "UploadFileDispatcher",
    "UploadFileRequest",
    "base_status",
    "build_status",
]
