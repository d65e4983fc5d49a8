"""Parsing of --duration / --time arguments into NoStopBefore timestamps."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from dateutil import parser as dateutil_parser

from .exceptions import TimeSpecError, UsageError

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_TERM_PATTERN = re.compile(r"\s*(\d+)\s*([A-Za-z]+)")

# unit -> seconds
_UNITS: dict[str, float] = {}
for _names, _seconds in (
    (("nsec", "ns"), 1e-9),
    (("usec", "us"), 1e-6),
    (("msec", "ms"), 1e-3),
    (("seconds", "second", "sec", "s"), 1),
    (("minutes", "minute", "min", "m"), 60),
    (("hours", "hour", "hr", "h"), 3600),
    (("days", "day", "d"), 86_400),
    (("weeks", "week", "w"), 604_800),
    (("months", "month", "M"), 2_630_016),  # 30.44 days
    (("years", "year", "y"), 31_557_600),  # 365.25 days
):
    for _name in _names:
        _UNITS[_name] = _seconds


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``1h``, ``2days 4h`` or ``90min``."""
    text = text.strip()
    if not text:
        raise TimeSpecError("Invalid duration: empty string")

    total = timedelta()
    pos = 0
    while pos < len(text):
        match = _TERM_PATTERN.match(text, pos)
        if match is None:
            raise TimeSpecError(f"Invalid duration: {text!r}: expected <number><unit> at position {pos}")
        number, unit = match.groups()
        seconds = _UNITS.get(unit)
        if seconds is None:
            raise TimeSpecError(f"Invalid duration: {text!r}: unknown unit {unit!r}")
        try:
            total += timedelta(seconds=int(number) * seconds)
        except OverflowError as exc:
            raise TimeSpecError(f"Invalid duration: {text!r}: out of range") from exc
        pos = match.end()
    return total


def parse_time(text: str) -> datetime:
    """Parse an RFC 3339-like time. Naive times are taken as UTC. Returns an aware UTC datetime."""
    try:
        parsed = dateutil_parser.isoparse(text.strip())
    except (ValueError, OverflowError) as exc:
        raise TimeSpecError(f"Invalid time: {text!r}: {exc}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def no_stop_before(duration: str | None = None, time: str | None = None, now: datetime | None = None) -> str:
    """Compute the NoStopBefore tag value from exactly one of duration or time."""
    if duration is not None and time is not None:
        raise UsageError("Cannot specify both --duration and --time")
    if duration is not None:
        if now is None:
            now = datetime.now(timezone.utc)
        try:
            return format_timestamp(now + parse_duration(duration))
        except OverflowError as exc:
            raise TimeSpecError(f"Invalid duration: {duration!r}: out of range") from exc
    if time is not None:
        return format_timestamp(parse_time(time))
    raise UsageError("Must specify either --duration or --time")
