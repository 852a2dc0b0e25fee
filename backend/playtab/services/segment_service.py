# Overview: Append-only time segment ledger for play sessions.

"""
Session Time Segment Ledger

INVARIANTS:
- One segment per station interval: written when a transfer leaves a
  station and when close freezes the final station.
- sequence starts at 1 and increases by one per session, with no gaps.
  Callers hold the session row lock, so max(sequence) + 1 is race-free;
  uq_session_segments_sequence is the backstop.
- started_at/ended_at/effective_seconds/sequence never change after insert.
  Only the tier-derived columns may be recomputed, from the stored rate
  snapshots, before the session is closed.

Helpers here never commit; they run inside the caller's transaction.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func

from ..extensions import db
from ..models import PlaySession, SessionTimeSegment, Station
from .billing import effective_seconds, time_charge_cents, round_cents
from playtab.time_utils import seconds_between


def next_sequence(session_id: int) -> int:
    current = (
        db.session.query(func.coalesce(func.max(SessionTimeSegment.sequence), 0))
        .filter(SessionTimeSegment.session_id == session_id)
        .scalar()
    )
    return int(current or 0) + 1


def _applied_rate(segment: SessionTimeSegment, pricing_tier: str) -> int:
    if pricing_tier == "group":
        return segment.rate_group_hourly_cents
    return segment.rate_solo_hourly_cents


def snapshot_segment(
    session: PlaySession,
    station: Station,
    *,
    ended_at: datetime,
    pricing_tier: str,
) -> SessionTimeSegment:
    """
    Freeze the session's current open interval as a ledger row.

    Uses the session's started_at/total_paused_seconds as they stand, so
    callers must fold any in-progress pause first (close) or end the
    interval at paused_at (transfer).
    """
    paused = session.total_paused_seconds or 0
    effective = effective_seconds(session.started_at, ended_at, paused)

    segment = SessionTimeSegment(
        session_id=session.id,
        sequence=next_sequence(session.id),
        station_id=station.id,
        station_name_snapshot=station.name,
        station_type_snapshot=station.station_type,
        started_at=session.started_at,
        ended_at=ended_at,
        paused_seconds=min(paused, seconds_between(session.started_at, ended_at)),
        effective_seconds=effective,
        pricing_tier=pricing_tier,
        rate_solo_hourly_cents=station.rate_solo_hourly_cents,
        rate_group_hourly_cents=station.rate_group_hourly_cents,
        rate_hourly_applied_cents=0,
        time_amount_cents=0,
    )
    apply_tier(segment, pricing_tier)

    db.session.add(segment)
    db.session.flush()
    return segment


def apply_tier(segment: SessionTimeSegment, pricing_tier: str) -> SessionTimeSegment:
    """Recompute the applied rate and charge for a tier from the row's own snapshots."""
    rate = _applied_rate(segment, pricing_tier)
    segment.pricing_tier = pricing_tier
    segment.rate_hourly_applied_cents = rate
    segment.time_amount_cents = round_cents(time_charge_cents(segment.effective_seconds, rate))
    return segment


def list_segments(session_id: int) -> list[SessionTimeSegment]:
    return (
        db.session.query(SessionTimeSegment)
        .filter_by(session_id=session_id)
        .order_by(SessionTimeSegment.sequence)
        .all()
    )


def total_amount_cents(session_id: int) -> int:
    total = (
        db.session.query(func.coalesce(func.sum(SessionTimeSegment.time_amount_cents), 0))
        .filter(SessionTimeSegment.session_id == session_id)
        .scalar()
    )
    return int(total or 0)
