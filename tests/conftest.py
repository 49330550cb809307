"""
Pytest fixtures for the sliced batch test suite.

Provides:
- Deterministic clock
- Jobs and in-memory slice stores
- SQLite in-memory database sessions for the SQL slice store
- A counting slice store for cache and query-load assertions
"""

from datetime import datetime, timezone
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from batch_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from batch_kernel.domain.clock import DeterministicClock
from batch_kernel.logging_config import LogContext, reset_logging
from sliced_batch.domain.types import BatchJob, JobState, Slice
from sliced_batch.stores.memory import InMemorySliceStore

START_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class CountingCategory:
    """Slice category with fixed counts that records every query."""

    def __init__(self, total=0, queued=0, running=0, failed=0, running_slices=()):
        self.total = total
        self.queued = queued
        self.running = running
        self.failed = failed
        self.slices = list(running_slices)
        self.calls: list[str] = []

    def count(self) -> int:
        self.calls.append("count")
        return self.total

    def queued_count(self) -> int:
        self.calls.append("queued_count")
        return self.queued

    def running_count(self) -> int:
        self.calls.append("running_count")
        return self.running

    def failed_count(self) -> int:
        self.calls.append("failed_count")
        return self.failed

    def running_slices(self) -> list[Slice]:
        self.calls.append("running_slices")
        return list(self.slices)


class CountingSliceStore:
    """SliceStore double with directly settable counts."""

    def __init__(self):
        self._input = CountingCategory()
        self._output = CountingCategory()

    @property
    def input(self) -> CountingCategory:
        return self._input

    @property
    def output(self) -> CountingCategory:
        return self._output


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(START_TIME)


@pytest.fixture
def job() -> BatchJob:
    return BatchJob(job_class_name="ImportJob")


@pytest.fixture
def running_job(clock) -> BatchJob:
    return BatchJob(
        job_class_name="ImportJob",
        state=JobState.RUNNING,
        started_at=clock.now(),
        worker_name="server1:1234",
    )


@pytest.fixture
def memory_store(running_job) -> InMemorySliceStore:
    return InMemorySliceStore(running_job)


@pytest.fixture
def counting_store() -> CountingSliceStore:
    return CountingSliceStore()


@pytest.fixture
def session() -> Generator[Session, None, None]:
    init_engine_from_url("sqlite://")
    create_tables()
    session = get_session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        drop_tables()
        reset_engine()
