"""
Tests for sliced_batch.domain.progress.percent_complete.
"""

import pytest

from sliced_batch.domain.progress import percent_complete
from sliced_batch.domain.types import BatchJob, JobState


class TestPercentComplete:
    @pytest.mark.parametrize("record_count", [None, 0, -10])
    @pytest.mark.parametrize(
        "state", [s for s in JobState if s != JobState.COMPLETED],
    )
    def test_unknown_record_count_is_zero(self, counting_store, state, record_count):
        counting_store.input.queued = 3
        job = BatchJob(state=state, record_count=record_count)
        assert percent_complete(job, counting_store) == 0

    def test_unknown_record_count_skips_store(self, counting_store):
        percent_complete(BatchJob(state=JobState.RUNNING), counting_store)
        assert counting_store.input.calls == []

    @pytest.mark.parametrize("queued", [0, 5, 10_000])
    def test_completed_is_100(self, counting_store, queued):
        counting_store.input.queued = queued
        job = BatchJob(state=JobState.COMPLETED, record_count=None)
        assert percent_complete(job, counting_store) == 100

    def test_three_queued_slices(self, counting_store):
        counting_store.input.queued = 3
        job = BatchJob(state=JobState.RUNNING, record_count=1000, slice_size=100)
        assert percent_complete(job, counting_store) == 70

    def test_estimate_above_record_count_clamps_to_99(self, counting_store):
        counting_store.input.queued = 11
        job = BatchJob(state=JobState.RUNNING, record_count=1000, slice_size=100)
        assert percent_complete(job, counting_store) == 99

    def test_nothing_queued_stays_below_100(self, counting_store):
        counting_store.input.queued = 0
        job = BatchJob(state=JobState.RUNNING, record_count=1000)
        assert percent_complete(job, counting_store) == 99

    def test_truncates_toward_zero(self, counting_store):
        counting_store.input.queued = 1
        job = BatchJob(state=JobState.RUNNING, record_count=300, slice_size=100)
        # 1 - 100/300 = 0.666...
        assert percent_complete(job, counting_store) == 66

    def test_everything_queued(self, counting_store):
        counting_store.input.queued = 10
        job = BatchJob(state=JobState.RUNNING, record_count=1000, slice_size=100)
        assert percent_complete(job, counting_store) == 0

    def test_uses_queued_count(self, counting_store):
        job = BatchJob(state=JobState.RUNNING, record_count=1000)
        percent_complete(job, counting_store)
        assert counting_store.input.calls == ["queued_count"]

    @pytest.mark.parametrize("queued", range(0, 15))
    def test_bounds_while_not_completed(self, counting_store, queued):
        counting_store.input.queued = queued
        job = BatchJob(state=JobState.RUNNING, record_count=1000, slice_size=100)
        result = percent_complete(job, counting_store)
        assert isinstance(result, int)
        assert 0 <= result <= 99
