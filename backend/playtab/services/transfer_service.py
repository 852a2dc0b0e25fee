# Overview: Moves an open play session to another station mid-flight.

"""
Session Transfer

WHY: Players move tables. The session (and its tab) must follow them while
each station keeps its own rate for the time spent on it.

EFFECT (one transaction):
1. Freeze the interval on the source station as a ledger segment, ending
   at paused_at when paused, else now.
2. Re-point the session at the destination and restart its open-interval
   clock (started_at = now, total_paused_seconds = 0). A paused session
   stays paused, with paused_at = now.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import PlaySession
from ..validation import require_pricing_tier
from . import segment_service, station_service
from .concurrency import run_with_retry
from .session_service import (
    SessionConflictError,
    SessionValidationError,
    get_open_session_for_station,
    get_session_for_update,
)
from playtab.time_utils import utcnow


def transfer_session(
    *,
    org_id: int,
    session_id: int,
    destination_station_id: int,
    ending_tier: str | None = None,
    next_tier: str | None = None,
    now: datetime | None = None,
) -> PlaySession:
    """
    Transfer a non-closed session to destination_station_id.

    Args:
        ending_tier: tier billed for the interval being closed (default: session tier)
        next_tier: tier for the new interval (default: ending_tier)

    Raises:
        SessionNotFoundError / StationNotFoundError: ids don't resolve
        SessionValidationError: session closed, same station, destination disabled
        SessionConflictError: destination already has an open session
    """
    ending_tier = require_pricing_tier(ending_tier, "ending_tier", allow_none=True)
    next_tier = require_pricing_tier(next_tier, "next_tier", allow_none=True)
    now = now or utcnow()

    def _op():
        session = get_session_for_update(org_id, session_id)
        if session.is_closed:
            raise SessionValidationError("Session is closed")
        if session.station_id == destination_station_id:
            raise SessionValidationError("Destination station must differ from the current station")

        destination = station_service.get_station(
            org_id, destination_station_id, message="Destination station not found"
        )
        if not destination.is_enabled:
            raise SessionValidationError("Destination station is disabled")

        if get_open_session_for_station(org_id, destination.id):
            raise SessionConflictError("Destination station already has an active session")

        source = station_service.get_station(org_id, session.station_id)
        closing_tier = ending_tier or session.pricing_tier
        opening_tier = next_tier or closing_tier

        was_paused = session.status == "paused"
        interval_end = session.paused_at if was_paused and session.paused_at else now

        segment_service.snapshot_segment(
            session,
            source,
            ended_at=interval_end,
            pricing_tier=closing_tier,
        )

        session.station_id = destination.id
        session.started_at = now
        session.paused_at = now if was_paused else None
        session.total_paused_seconds = 0
        session.pricing_tier = opening_tier
        session.rate_hourly_snapshot_cents = destination.rate_for_tier(opening_tier)

        try:
            db.session.flush()
        except IntegrityError:
            raise SessionConflictError("Destination station already has an active session")

        db.session.commit()
        return session

    return run_with_retry(_op)
