"""
Tests for sliced_batch.domain.types.

Validates enum values, BatchJob defaults, the slice_size invariant, flag
readers and elapsed time.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from batch_kernel.exceptions import InvalidSliceSizeError, NaiveTimestampError
from sliced_batch.domain.types import (
    CONFIGURABLE_FIELDS,
    BatchJob,
    JobState,
    Slice,
    SliceCategoryName,
    SliceState,
    SubState,
    job_field_names,
)


# =============================================================================
# Enum tests
# =============================================================================


class TestJobState:
    def test_values(self):
        assert {s.value for s in JobState} == {
            "queued", "running", "paused", "failed", "completed", "aborted",
        }

    def test_is_str_enum(self):
        assert isinstance(JobState.RUNNING, str)


class TestSubState:
    def test_values(self):
        assert [s.value for s in SubState] == [
            "none", "before", "processing", "after", "complete",
        ]


class TestSliceEnums:
    def test_slice_states(self):
        assert {s.value for s in SliceState} == {
            "queued", "running", "failed", "completed",
        }

    def test_categories(self):
        assert SliceCategoryName.INPUT.value == "input"
        assert SliceCategoryName.OUTPUT.value == "output"


# =============================================================================
# BatchJob tests
# =============================================================================


class TestBatchJobDefaults:
    def test_defaults(self):
        job = BatchJob()
        assert job.state == JobState.QUEUED
        assert job.sub_state == SubState.NONE
        assert job.slice_size == 100
        assert job.record_count is None
        assert job.collect_output is False
        assert job.collect_nil_output is True
        assert job.compress is False
        assert job.encrypt is False
        assert job.upload_file_name is None
        assert job.full_file_name is None
        assert job.worker_name is None

    def test_unique_ids(self):
        assert BatchJob().job_id != BatchJob().job_id

    def test_identity_equality(self):
        job_id = uuid4()
        assert BatchJob(job_id=job_id) != BatchJob(job_id=job_id)

    def test_hashable(self):
        job = BatchJob()
        assert {job: 1}[job] == 1

    def test_configurable_fields_exist(self):
        assert set(CONFIGURABLE_FIELDS) <= set(job_field_names())


class TestSliceSizeInvariant:
    @pytest.mark.parametrize("value", [0, -1, 1.5, "100", None, True])
    def test_rejected_at_construction(self, value):
        with pytest.raises(InvalidSliceSizeError) as exc_info:
            BatchJob(slice_size=value)
        assert exc_info.value.slice_size == value

    def test_rejected_on_assignment(self):
        job = BatchJob(slice_size=10)
        with pytest.raises(InvalidSliceSizeError):
            job.slice_size = 0
        assert job.slice_size == 10

    def test_positive_assignment(self):
        job = BatchJob()
        job.slice_size = 250
        assert job.slice_size == 250


class TestTimestampInvariant:
    NAIVE = datetime(2024, 1, 1, 12, 0, 0)

    @pytest.mark.parametrize("name", ["created_at", "started_at", "completed_at"])
    def test_naive_rejected_at_construction(self, name):
        with pytest.raises(NaiveTimestampError) as exc_info:
            BatchJob(**{name: self.NAIVE})
        assert exc_info.value.field_name == name

    def test_naive_rejected_on_assignment(self):
        job = BatchJob()
        with pytest.raises(NaiveTimestampError):
            job.started_at = self.NAIVE
        assert job.started_at is None

    def test_non_datetime_rejected(self):
        with pytest.raises(NaiveTimestampError):
            BatchJob(completed_at="2024-01-01T12:00:00Z")

    def test_aware_and_none_accepted(self):
        aware = self.NAIVE.replace(tzinfo=timezone(timedelta(hours=-5)))
        job = BatchJob(started_at=aware)
        job.completed_at = aware + timedelta(minutes=1)
        job.completed_at = None
        assert job.elapsed_seconds(datetime(2024, 1, 1, 17, 1, tzinfo=timezone.utc)) == 60.0


class TestFlagReaders:
    def test_encrypted(self):
        assert BatchJob(encrypt=True).encrypted is True
        assert BatchJob().encrypted is False

    def test_compressed(self):
        assert BatchJob(compress=True).compressed is True
        assert BatchJob().compressed is False

    def test_collects_output(self):
        assert BatchJob(collect_output=True).collects_output is True
        assert BatchJob().collects_output is False

    def test_truthy_non_bool_is_not_true(self):
        assert BatchJob(encrypt="yes").encrypted is False

    def test_collects_nil_output_requires_collect_output(self):
        assert BatchJob(collect_output=False, collect_nil_output=True).collects_nil_output is False
        assert BatchJob(collect_output=True, collect_nil_output=True).collects_nil_output is True
        assert BatchJob(collect_output=True, collect_nil_output=False).collects_nil_output is False


class TestRecordCount:
    @pytest.mark.parametrize("value", [None, 0, -5])
    def test_unknown(self, value):
        assert BatchJob(record_count=value).has_record_count is False

    def test_known(self):
        assert BatchJob(record_count=1).has_record_count is True


class TestElapsedSeconds:
    NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_not_started(self):
        assert BatchJob().elapsed_seconds(self.NOW) == 0.0

    def test_running(self):
        job = BatchJob(started_at=self.NOW - timedelta(seconds=90))
        assert job.elapsed_seconds(self.NOW) == 90.0

    def test_completed_ignores_now(self):
        job = BatchJob(
            started_at=self.NOW - timedelta(hours=2),
            completed_at=self.NOW - timedelta(hours=1),
        )
        assert job.elapsed_seconds(self.NOW) == 3600.0

    def test_never_negative(self):
        job = BatchJob(started_at=self.NOW + timedelta(seconds=5))
        assert job.elapsed_seconds(self.NOW) == 0.0


# =============================================================================
# Slice tests
# =============================================================================


class TestSlice:
    def test_frozen(self):
        s = Slice(
            slice_id=uuid4(),
            job_id=uuid4(),
            category=SliceCategoryName.INPUT,
            state=SliceState.QUEUED,
        )
        with pytest.raises(FrozenInstanceError):
            s.state = SliceState.RUNNING  # type: ignore[misc]

    def test_defaults(self):
        s = Slice(
            slice_id=uuid4(),
            job_id=uuid4(),
            category=SliceCategoryName.OUTPUT,
            state=SliceState.COMPLETED,
        )
        assert s.worker_name is None
        assert s.failure_count == 0
        assert s.records == ()
