"""
Tests for batch_config.bridges.job_from_properties.
"""

from uuid import uuid4

import pytest

from batch_config.bridges import JOB_PROPERTY_NAMES, job_from_properties
from batch_config.loader import parse_configuration
from batch_kernel.exceptions import InvalidSliceSizeError, UnknownJobSettingError
from sliced_batch.domain.types import JobState, SubState


@pytest.fixture
def config():
    return parse_configuration({
        "defaults": {"slice_size": 100},
        "job_classes": {"ReportJob": {"slice_size": 500, "collect_output": True}},
    })


class TestJobFromProperties:
    def test_class_settings_applied(self, config, clock):
        job = job_from_properties("ReportJob", {}, config, clock=clock)
        assert job.job_class_name == "ReportJob"
        assert job.slice_size == 500
        assert job.collect_output is True
        assert job.state == JobState.QUEUED
        assert job.sub_state == SubState.NONE
        assert job.created_at == clock.now()

    def test_properties_override_settings(self, config, clock):
        job = job_from_properties(
            "ReportJob",
            {"slice_size": 50, "description": "monthly", "upload_file_name": "in.csv"},
            config,
            clock=clock,
        )
        assert job.slice_size == 50
        assert job.description == "monthly"
        assert job.upload_file_name == "in.csv"

    def test_unconfigured_class_uses_defaults(self, config, clock):
        job = job_from_properties("ImportJob", {}, config, clock=clock)
        assert job.slice_size == 100
        assert job.collect_output is False

    def test_job_id(self, config, clock):
        job_id = uuid4()
        assert job_from_properties("ImportJob", {}, config, job_id=job_id, clock=clock).job_id == job_id

    @pytest.mark.parametrize("name", ["state", "record_count", "worker_name", "bogus"])
    def test_unknown_property(self, config, clock, name):
        with pytest.raises(UnknownJobSettingError) as exc_info:
            job_from_properties("ImportJob", {name: 1}, config, clock=clock)
        assert exc_info.value.setting == name

    def test_invalid_slice_size(self, config, clock):
        with pytest.raises(InvalidSliceSizeError):
            job_from_properties("ImportJob", {"slice_size": 0}, config, clock=clock)

    def test_property_names(self):
        assert "upload_file_name" in JOB_PROPERTY_NAMES
        assert "full_file_name" in JOB_PROPERTY_NAMES
        assert "state" not in JOB_PROPERTY_NAMES
