# Overview: Closes a play session and totals its time segment ledger.

"""
Checkout / Close

EFFECT (one transaction):
1. Fold an in-progress pause into total_paused_seconds.
2. Apply front-desk tier corrections to earlier segments, recomputed from
   each segment's stored rate snapshots.
3. Freeze the final open interval as the last segment.
4. total_amount_cents = sum of every segment's time_amount_cents.
5. Mark closed. Closed is terminal; closing again returns the record as is.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from ..extensions import db
from ..models import PlaySession
from ..validation import require_pricing_tier
from . import segment_service, station_service
from .concurrency import run_with_retry
from .session_service import SessionValidationError, get_session_for_update
from playtab.time_utils import utcnow, seconds_between


@dataclass(frozen=True)
class SegmentTierOverride:
    segment_id: int
    pricing_tier: str


def _normalize_overrides(overrides: Iterable[SegmentTierOverride] | None) -> dict[int, str]:
    normalized: dict[int, str] = {}
    for override in overrides or ():
        tier = require_pricing_tier(override.pricing_tier, "segment pricing_tier")
        # Later entries for the same segment win
        normalized[override.segment_id] = tier
    return normalized


def close_session(
    *,
    org_id: int,
    session_id: int,
    current_segment_tier: str | None = None,
    segment_tier_overrides: Iterable[SegmentTierOverride] | None = None,
    now: datetime | None = None,
) -> PlaySession:
    """
    Close a session and compute its final time charge.

    Raises:
        SessionNotFoundError: session does not resolve under the tenant
        SessionValidationError: an override references a segment of another session
    """
    current_segment_tier = require_pricing_tier(current_segment_tier, "current_segment_tier", allow_none=True)
    overrides = _normalize_overrides(segment_tier_overrides)
    now = now or utcnow()

    def _op():
        session = get_session_for_update(org_id, session_id)
        if session.is_closed:
            return session

        existing = {seg.id: seg for seg in segment_service.list_segments(session.id)}
        unknown = sorted(seg_id for seg_id in overrides if seg_id not in existing)
        if unknown:
            raise SessionValidationError(
                "Segment override does not belong to this session",
                details={"segment_ids": unknown},
            )

        if session.status == "paused" and session.paused_at:
            session.total_paused_seconds = (
                (session.total_paused_seconds or 0) + seconds_between(session.paused_at, now)
            )
            session.paused_at = None

        for seg_id, tier in overrides.items():
            segment_service.apply_tier(existing[seg_id], tier)

        station = station_service.get_station(org_id, session.station_id)
        final = segment_service.snapshot_segment(
            session,
            station,
            ended_at=now,
            pricing_tier=current_segment_tier or session.pricing_tier,
        )

        session.total_amount_cents = segment_service.total_amount_cents(session.id)
        session.status = "closed"
        session.closed_at = now
        session.pricing_tier = final.pricing_tier
        session.rate_hourly_snapshot_cents = final.rate_hourly_applied_cents

        db.session.commit()
        return session

    return run_with_retry(_op)
