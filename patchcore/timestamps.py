"""Timestamp formats used on the wire, small string helpers and signal handling."""

from __future__ import annotations

import re
import signal
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .logs import log

VMAAS_API_PREFIX = "/api/v3"
RBAC_API_PREFIX = "/api/rbac/v1"

# Layout with a numeric offset that never uses "Z", e.g. 2021-01-01T12:00:00-04:00
RFC3339_NO_TZ = "YYYY-MM-DDTHH:MM:SS+hh:mm"

_DATE_TIME = r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]+))?"
_NO_TZ_RE = re.compile(_DATE_TIME + r"([+-][0-9]{2}:[0-9]{2})")
_RFC3339_RE = re.compile(_DATE_TIME + r"(Z|[+-][0-9]{2}:[0-9]{2})")


def remove_invalid_chars(s: str) -> str:
    """Drop characters the database driver refuses in parameter values (NUL)."""
    return s.replace("\x00", "")


def empty_to_nil(s: Optional[str]) -> Optional[str]:
    """Turn an empty string into None, leave anything else unchanged."""
    if s is not None and s == "":
        return None
    return s


def _aware(t: datetime) -> datetime:
    if t.tzinfo is None or t.utcoffset() is None:
        return t.replace(tzinfo=timezone.utc)
    return t


def _offset_str(t: datetime) -> str:
    total = int(t.utcoffset().total_seconds())
    sign = "-" if total < 0 else "+"
    total = abs(total)
    return f"{sign}{total // 3600:02d}:{total % 3600 // 60:02d}"


def _date_time_str(t: datetime) -> str:
    return (
        f"{t.year:04d}-{t.month:02d}-{t.day:02d}"
        f"T{t.hour:02d}:{t.minute:02d}:{t.second:02d}"
    )


def format_rfc3339_no_tz(t: datetime) -> str:
    """Format with a numeric offset even for UTC; naive values are taken as UTC."""
    t = _aware(t)
    return _date_time_str(t) + _offset_str(t)


def format_rfc3339(t: datetime) -> str:
    """Format as RFC 3339 with whole seconds, using "Z" for a zero offset."""
    t = _aware(t)
    if t.utcoffset() == timedelta(0):
        return _date_time_str(t) + "Z"
    return _date_time_str(t) + _offset_str(t)


def _parse_offset(text: str) -> timezone:
    if text == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    hours, minutes = int(text[1:3]), int(text[4:6])
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def _parse(pattern: re.Pattern, s: str) -> datetime:
    match = pattern.fullmatch(s)
    if match is None:
        raise ValueError(f"cannot parse {s!r} as timestamp")
    year, month, day, hour, minute, second, frac, offset = match.groups()
    micro = int((frac or "0")[:6].ljust(6, "0"))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second),
        micro, tzinfo=_parse_offset(offset),
    )


def parse_rfc3339_no_tz(s: str) -> datetime:
    """Parse a timestamp that carries a numeric offset ("Z" is rejected)."""
    return _parse(_NO_TZ_RE, s)


def parse_rfc3339(s: str) -> datetime:
    """Parse an RFC 3339 timestamp with either "Z" or a numeric offset."""
    return _parse(_RFC3339_RE, s)


def handle_signals(stop_event: threading.Event) -> dict[int, Callable]:
    """Set ``stop_event`` on SIGINT/SIGTERM; returns the previous handlers."""

    def _handler(signum, frame):
        stop_event.set()
        log().info("SIGTERM/SIGINT handled")

    return {sig: signal.signal(sig, _handler) for sig in (signal.SIGINT, signal.SIGTERM)}