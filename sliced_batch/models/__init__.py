"""
sliced_batch.models -- ORM models for slice persistence.

Architecture: sliced_batch/models. Imports from batch_kernel.db.base only.
"""

from sliced_batch.models.slice import SliceModel

__all__ = [
    "SliceModel",
]
