"""
sliced_batch.stores -- SliceStore protocol and reference implementations.
"""

from sliced_batch.stores.base import SliceCategory, SliceStore
from sliced_batch.stores.memory import InMemorySliceCategory, InMemorySliceStore
from sliced_batch.stores.sql import SqlSliceCategory, SqlSliceStore

__all__ = [
    "InMemorySliceCategory",
    "InMemorySliceStore",
    "SliceCategory",
    "SliceStore",
    "SqlSliceCategory",
    "SqlSliceStore",
]
