"""Tests for --duration / --time parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from ec2_by_name.exceptions import TimeSpecError, UsageError
from ec2_by_name.timespec import no_stop_before, parse_duration, parse_time

NOW = datetime(2024, 1, 1, 12, 30, 15, 999_000, tzinfo=timezone.utc)


class TestParseDuration:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1h", timedelta(hours=1)),
            ("90min", timedelta(minutes=90)),
            ("1h 30m", timedelta(minutes=90)),
            ("2days4h", timedelta(days=2, hours=4)),
            ("1w", timedelta(weeks=1)),
            ("45s", timedelta(seconds=45)),
            ("500ms", timedelta(milliseconds=500)),
            ("1M", timedelta(days=30.44)),
            ("1y", timedelta(days=365.25)),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "h", "1", "1 fortnight", "1h and 2m", "-1h"])
    def test_invalid(self, text):
        with pytest.raises(TimeSpecError):
            parse_duration(text)

    def test_time_spec_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_duration("soon")


class TestParseTime:
    @pytest.mark.parametrize(
        "text",
        [
            "2024-06-01T18:00:00Z",
            "2024-06-01T18:00:00",
            "2024-06-01 18:00:00",
            "2024-06-01T20:00:00+02:00",
            "2024-06-01T18:00:00.75Z",
        ],
    )
    def test_valid(self, text):
        parsed = parse_time(text)
        assert parsed.tzinfo == timezone.utc
        assert parsed.replace(microsecond=0) == datetime(2024, 6, 1, 18, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text", ["tomorrow", "2024-13-01T00:00:00Z", ""])
    def test_invalid(self, text):
        with pytest.raises(TimeSpecError):
            parse_time(text)


class TestNoStopBefore:
    def test_duration_adds_to_now(self):
        assert no_stop_before(duration="1h", now=NOW) == "2024-01-01T13:30:15Z"

    def test_duration_defaults_to_current_time(self):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        value = no_stop_before(duration="1h")
        after = datetime.now(timezone.utc)
        stamped = datetime.strptime(value, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
        assert before + timedelta(hours=1) <= stamped <= after + timedelta(hours=1)

    def test_time_is_converted_to_utc(self):
        assert no_stop_before(time="2024-06-01T20:00:00+02:00") == "2024-06-01T18:00:00Z"

    def test_both_is_usage_error(self):
        with pytest.raises(UsageError, match="both"):
            no_stop_before(duration="1h", time="2024-06-01T18:00:00Z")

    def test_neither_is_usage_error(self):
        with pytest.raises(UsageError, match="either"):
            no_stop_before()
