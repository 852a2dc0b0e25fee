# Overview: Pure time accounting for station sessions. No I/O.

"""
Time Accounting

effective seconds = gross interval seconds - paused seconds, floored at 0.
time charge      = effective hours * hourly rate, kept as an unrounded
                   Decimal number of cents.

Rounding to whole cents happens only when a value is persisted (segment
time_amount_cents) or rendered; sums of stored segment amounts are exact.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from playtab.time_utils import seconds_between


SECONDS_PER_HOUR = 3600


def effective_seconds(started_at: datetime, reference_end: datetime, total_paused_seconds: int | None) -> int:
    gross = seconds_between(started_at, reference_end)
    return max(0, gross - (total_paused_seconds or 0))


def time_charge_cents(effective_secs: int, rate_hourly_cents: int) -> Decimal:
    return Decimal(effective_secs) * Decimal(rate_hourly_cents) / Decimal(SECONDS_PER_HOUR)


def round_cents(amount: Decimal) -> int:
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def reference_end(session, now: datetime) -> datetime:
    """
    End instant of the session's current interval for display/billing.

    Paused sessions are frozen at paused_at; closed sessions at closed_at.
    """
    if session.status == "paused" and session.paused_at:
        return session.paused_at
    if session.status == "closed" and session.closed_at:
        return session.closed_at
    return now


def open_interval_seconds(session, now: datetime) -> int:
    """Effective seconds of the still-open interval (0 once closed)."""
    if session.status == "closed":
        return 0
    return effective_seconds(session.started_at, reference_end(session, now), session.total_paused_seconds)


def format_cents(cents: int | Decimal) -> str:
    if isinstance(cents, Decimal):
        cents = round_cents(cents)
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}${cents // 100}.{cents % 100:02d}"
