"""
Tests for sliced_batch.domain.duration.seconds_as_duration.
"""

import pytest

from sliced_batch.domain.duration import seconds_as_duration


class TestSecondsAsDuration:
    def test_none(self):
        assert seconds_as_duration(None) is None

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0.0042, "4.200ms"),
            (0.0125, "12.5ms"),
            (0.0, "0.000ms"),
            (1.5, "1.500s"),
            (59.999, "59.999s"),
            (60, "1m 0s"),
            (125.7, "2m 5s"),
            (3600, "1h 0m"),
            (3600 * 5 + 60 * 7 + 30, "5h 7m"),
            (86400, "1d 0h 0m"),
            (86400 * 2 + 3600 * 3 + 60 * 4, "2d 3h 4m"),
        ],
    )
    def test_rendering(self, seconds, expected):
        assert seconds_as_duration(seconds) == expected
