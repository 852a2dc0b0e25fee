# Overview: Clock and timestamp helpers; every stored instant is naive UTC.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Default clock for the session core (naive UTC)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a client-supplied start time.

    Blank or missing values mean "use the server clock" and return None.
    Offsets (including a trailing Z) are converted to UTC; a value without
    an offset is taken as UTC already.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return as_naive_utc(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Whole-second ISO-8601 with a trailing 'Z'; None passes through."""
    if dt is None:
        return None
    return as_naive_utc(dt).replace(microsecond=0).isoformat() + "Z"


def seconds_between(start: datetime, end: datetime) -> int:
    """Whole seconds from start to end, floored at zero."""
    return max(0, int((end - start).total_seconds()))
