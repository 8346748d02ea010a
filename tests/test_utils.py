"""Tests for the utils module."""

import pytest

from pagetime.utils import format_clock, format_duration


class TestFormatDuration:
    """Tests for the format_duration function."""

    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "0s"), (42, "42s"), (59.6, "60s"), (60, "1m"), (754, "12m"), (3600, "1h 0m"), (3900, "1h 5m")],
    )
    def test_short(self, seconds, expected):
        """Test the default short format."""
        assert format_duration(seconds) == expected

    @pytest.mark.parametrize(
        "seconds, expected",
        [(30, "30 seconds"), (300, "5 minutes"), (7200, "2h"), (7500, "2h 5m")],
    )
    def test_detailed(self, seconds, expected):
        """Test the detailed format."""
        assert format_duration(seconds, "detailed") == expected

    @pytest.mark.parametrize(
        "seconds, expected",
        [(90000, "1d 1h"), (172800, "2d"), (3900, "1h 5m")],
    )
    def test_goal(self, seconds, expected):
        """Test the goal format collapses to days."""
        assert format_duration(seconds, "goal") == expected

    def test_negative(self):
        """Test negative durations display as zero."""
        assert format_duration(-5) == "0s"


class TestFormatClock:
    """Tests for the format_clock function."""

    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "0:00"), (9.9, "0:09"), (75, "1:15"), (3725, "1:02:05"), (-3, "0:00")],
    )
    def test_format_clock(self, seconds, expected):
        """Test stopwatch formatting."""
        assert format_clock(seconds) == expected
