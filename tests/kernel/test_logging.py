"""Tests for batch_kernel.logging_config -- JSON lines and LogContext."""

import json
import logging
from io import StringIO
from uuid import uuid4

import pytest

from batch_kernel.exceptions import SliceNotFoundError
from batch_kernel.logging_config import (
    LogContext,
    configure_logging,
    get_logger,
    reset_logging,
)


class CapturedLog:
    """JSON lines written by the sliced_batch handler into memory."""

    def __init__(self):
        self.stream = StringIO()

    def records(self) -> list[dict]:
        return [json.loads(line) for line in self.stream.getvalue().splitlines() if line]

    def last(self) -> dict:
        return self.records()[-1]


@pytest.fixture
def captured() -> CapturedLog:
    capture = CapturedLog()
    configure_logging(stream=capture.stream)
    return capture


log = get_logger("test")


# ---------------------------------------------------------------------------
# JSON output
# ---------------------------------------------------------------------------


class TestJsonLines:
    def test_core_fields(self, captured):
        log.info("slice_claimed")

        record = captured.last()
        assert record["level"] == "INFO"
        assert record["message"] == "slice_claimed"
        assert record["logger"] == "sliced_batch.test"
        assert record["ts"].endswith("+00:00")

    def test_extra_fields(self, captured):
        log.info("records_uploaded", extra={"record_count": 250, "slice_size": 100})

        record = captured.last()
        assert (record["record_count"], record["slice_size"]) == (250, 100)

    def test_uuid_extra_serialized(self, captured):
        job_uuid = uuid4()
        log.info("job", extra={"job_uuid": job_uuid})
        assert captured.last()["job_uuid"] == str(job_uuid)

    def test_typed_exception_fields(self, captured):
        try:
            raise SliceNotFoundError("abc")
        except SliceNotFoundError:
            log.exception("claim_failed")

        record = captured.last()
        assert record["exc_type"] == "SliceNotFoundError"
        assert record["exc_code"] == "SLICE_NOT_FOUND"
        assert record["exc_slice_id"] == "abc"
        assert "Traceback" in record["traceback"]


# ---------------------------------------------------------------------------
# LogContext
# ---------------------------------------------------------------------------


class TestLogContext:
    def test_fields_attached(self, captured):
        LogContext.set(job_id="job-1", worker_name="server1:1234")
        log.info("claimed")

        record = captured.last()
        assert record["job_id"] == "job-1"
        assert record["worker_name"] == "server1:1234"

    def test_set_ignores_none(self):
        LogContext.set(job_id="job-1")
        LogContext.set(job_id=None, job_class_name="ImportJob")
        assert LogContext.get_all() == {"job_id": "job-1", "job_class_name": "ImportJob"}

    def test_clear(self):
        LogContext.set(correlation_id="c1")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores_outer_values(self):
        LogContext.set(job_id="outer")
        with LogContext.bind(job_id="inner", job_class_name="ImportJob"):
            assert LogContext.get_all() == {"job_id": "inner", "job_class_name": "ImportJob"}
        assert LogContext.get_all() == {"job_id": "outer"}

    def test_bind_restores_on_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(job_id="inner"):
                raise RuntimeError
        assert LogContext.get_all() == {}

    def test_context_beats_extra(self, captured):
        with LogContext.bind(job_id="from-context"):
            log.info("x", extra={"job_id": "from-extra"})
        assert captured.last()["job_id"] == "from-context"

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="Unknown log context field"):
            with LogContext.bind(tenant="x"):
                pass


# ---------------------------------------------------------------------------
# configure_logging / reset_logging
# ---------------------------------------------------------------------------


class TestSetup:
    def test_second_configure_is_ignored(self, captured):
        other = StringIO()
        configure_logging(stream=other)
        log.info("once")

        assert len(captured.records()) == 1
        assert other.getvalue() == ""

    def test_level(self):
        stream = StringIO()
        configure_logging(level=logging.WARNING, stream=stream)
        log.info("hidden")
        log.warning("shown")

        messages = [json.loads(line)["message"] for line in stream.getvalue().splitlines()]
        assert messages == ["shown"]

    def test_reset_removes_handler(self, captured):
        reset_logging()
        assert logging.getLogger("sliced_batch").handlers == []
        assert logging.getLogger("sliced_batch").propagate is True
