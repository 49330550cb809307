"""
SliceStore protocol -- the read interface progress reporting consumes.

Contract:
    A slice store exposes one ``SliceCategory`` per category (``input`` and
    ``output``).  Each query is an independent point query: no atomicity
    across calls is assumed, so ``queued + running + failed`` need not add up
    to anything in particular at any instant.

Non-goals:
    - Writes.  Claiming, completing and retrying slices belong to the
      scheduler and workers; reference stores expose their own mutators.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from sliced_batch.domain.types import Slice


@runtime_checkable
class SliceCategory(Protocol):
    """Counts and running slices for one category of a job's slices."""

    def count(self) -> int:
        """Total number of slices currently held in this category."""
        ...

    def queued_count(self) -> int: ...

    def running_count(self) -> int: ...

    def failed_count(self) -> int: ...

    def running_slices(self) -> Iterable[Slice]:
        """Slices currently claimed by a worker, in store order."""
        ...


@runtime_checkable
class SliceStore(Protocol):
    """Input and output slice categories of one job."""

    @property
    def input(self) -> SliceCategory: ...

    @property
    def output(self) -> SliceCategory: ...
