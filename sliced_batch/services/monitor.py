"""
SlicedJobMonitor -- read-only progress facade for one job.

Contract:
    Binds a job, its slice store and a clock, and exposes the queries that
    status APIs, dashboards and CLIs call: ``percent_complete()``,
    ``status()``, ``worker_names()``, ``worker_count()`` and the job flags.

Non-goals:
    - Does NOT write to the slice store or advance job state.
    - Does NOT catch slice store failures -- they reach the caller as raised.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Callable, Mapping

from batch_kernel.domain.clock import Clock, SystemClock

from batch_config.schema import BatchConfiguration

from sliced_batch.domain.progress import percent_complete
from sliced_batch.domain.types import BatchJob
from sliced_batch.domain.workers import worker_count, worker_names
from sliced_batch.services.status_reporter import base_status, build_status
from sliced_batch.stores.base import SliceStore

BaseStatusProvider = Callable[[BatchJob, datetime, Any], Mapping[str, Any]]


class SlicedJobMonitor:
    """Progress, status and worker queries for a single sliced job."""

    def __init__(
        self,
        job: BatchJob,
        slice_store: SliceStore,
        clock: Clock | None = None,
        base_status_provider: BaseStatusProvider | None = None,
        default_time_zone: str | tzinfo | None = None,
    ):
        self._job = job
        self._slice_store = slice_store
        self._clock = clock or SystemClock()
        self._base_status = base_status_provider or base_status
        self._default_time_zone = default_time_zone

    @classmethod
    def from_config(
        cls,
        job: BatchJob,
        slice_store: SliceStore,
        config: BatchConfiguration,
        clock: Clock | None = None,
    ) -> SlicedJobMonitor:
        """Monitor reporting timestamps in ``config.reporting.time_zone``."""
        return cls(
            job,
            slice_store,
            clock=clock,
            default_time_zone=config.reporting.time_zone,
        )

    @property
    def job(self) -> BatchJob:
        return self._job

    def percent_complete(self) -> int:
        return percent_complete(self._job, self._slice_store)

    def status(self, time_zone: str | tzinfo | None = None) -> dict[str, Any]:
        now = self._clock.now()
        zone = time_zone if time_zone is not None else self._default_time_zone
        return build_status(
            self._job,
            self._slice_store,
            self._base_status(self._job, now, zone),
            now,
        )

    def worker_names(self) -> list[str | None]:
        return worker_names(self._job, self._slice_store)

    def worker_count(self) -> int:
        return worker_count(self._job, self._slice_store, self._clock.now())

    def encrypted(self) -> bool:
        return self._job.encrypted

    def compressed(self) -> bool:
        return self._job.compressed

    def collects_output(self) -> bool:
        return self._job.collects_output

    def collects_nil_output(self) -> bool:
        return self._job.collects_nil_output
