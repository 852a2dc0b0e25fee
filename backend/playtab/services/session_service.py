# Overview: Service-layer operations for the play session state machine.

"""
Play Session Service

WHY: A session is the unit of billing for a station. This module owns
start / pause / resume; transfer and close live in their own services but
share the lookups and error types defined here.

STATES:
- active -> paused (pause)
- paused -> active (resume)
- active|paused -> closed (checkout_service.close_session, terminal)

DESIGN PRINCIPLES:
- One non-closed session per station (partial unique index + idempotent start)
- Pause bookkeeping only covers the current open interval
- Invalid transitions are reported, never coerced
"""

from __future__ import annotations

from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import PlaySession
from ..validation import (
    ServiceError,
    NotFoundError,
    ValidationError,
    ConflictError,
    require_pricing_tier,
)
from . import station_service
from .concurrency import lock_for_update, run_with_retry
from playtab.time_utils import utcnow, seconds_between


class SessionError(ServiceError):
    """Base class for session lifecycle errors."""
    pass


class SessionNotFoundError(SessionError, NotFoundError):
    pass


class SessionValidationError(SessionError, ValidationError):
    pass


class SessionConflictError(SessionError, ConflictError):
    pass


# =============================================================================
# LOOKUPS
# =============================================================================

def get_session(org_id: int, session_id: int) -> PlaySession:
    session = db.session.query(PlaySession).filter_by(id=session_id, org_id=org_id).first()
    if not session:
        raise SessionNotFoundError("Session not found")
    return session


def get_session_for_update(org_id: int, session_id: int) -> PlaySession:
    session = lock_for_update(
        db.session.query(PlaySession).filter_by(id=session_id, org_id=org_id)
    ).first()
    if not session:
        raise SessionNotFoundError("Session not found")
    return session


def get_open_session_for_station(org_id: int, station_id: int) -> PlaySession | None:
    return (
        db.session.query(PlaySession)
        .filter(
            PlaySession.org_id == org_id,
            PlaySession.station_id == station_id,
            PlaySession.status != "closed",
        )
        .order_by(PlaySession.id.desc())
        .first()
    )


def touch_session(session: PlaySession, now: datetime) -> None:
    """
    Bump the session row inside a unit that otherwise only writes child rows.

    The version_id increment makes a concurrent close/transfer on the same
    session collide with this unit instead of interleaving with it.
    """
    session.updated_at = now


# =============================================================================
# TRANSITIONS
# =============================================================================

def start_session(
    *,
    org_id: int,
    station_id: int,
    pricing_tier: str,
    started_at: datetime | None = None,
    now: datetime | None = None,
) -> PlaySession:
    """
    Start a session on a station, or return the one already open there.

    WHY idempotent: a retried request or a double-click must not create a
    second session on the same station.

    Raises:
        StationNotFoundError: station does not resolve under the tenant
        SessionValidationError: station disabled, or started_at beyond the clock
            skew (a start inside the skew is clamped to now)
    """
    tier = require_pricing_tier(pricing_tier)
    now = now or utcnow()

    def _op():
        existing = get_open_session_for_station(org_id, station_id)
        if existing:
            return existing

        station = station_service.get_station(org_id, station_id)
        if not station.is_enabled:
            raise SessionValidationError("Station is disabled")

        start = started_at or now
        skew = timedelta(seconds=current_app.config.get("START_TIME_SKEW_SECONDS", 120))
        if start > now + skew:
            raise SessionValidationError("started_at cannot be in the future")
        # Within the skew: clamp, so started_at <= now always holds
        start = min(start, now)

        session = PlaySession(
            org_id=org_id,
            station_id=station.id,
            status="active",
            opened_at=start,
            started_at=start,
            paused_at=None,
            total_paused_seconds=0,
            pricing_tier=tier,
            rate_hourly_snapshot_cents=station.rate_for_tier(tier),
        )
        db.session.add(session)
        try:
            db.session.flush()
        except IntegrityError:
            # Lost a race with another start on the same station
            db.session.rollback()
            existing = get_open_session_for_station(org_id, station_id)
            if existing:
                return existing
            raise

        db.session.commit()
        return session

    return run_with_retry(_op)


def pause_session(*, org_id: int, session_id: int, now: datetime | None = None) -> PlaySession:
    now = now or utcnow()

    def _op():
        session = get_session_for_update(org_id, session_id)
        if session.status != "active":
            raise SessionNotFoundError("Session not found or not active")

        session.status = "paused"
        session.paused_at = now
        db.session.commit()
        return session

    return run_with_retry(_op)


def resume_session(*, org_id: int, session_id: int, now: datetime | None = None) -> PlaySession:
    now = now or utcnow()

    def _op():
        session = get_session_for_update(org_id, session_id)
        if session.status != "paused" or not session.paused_at:
            raise SessionNotFoundError("Session not found or not paused")

        delta = seconds_between(session.paused_at, now)
        session.total_paused_seconds = (session.total_paused_seconds or 0) + delta
        session.paused_at = None
        session.status = "active"
        db.session.commit()
        return session

    return run_with_retry(_op)


def list_open_sessions(org_id: int | None = None) -> list[PlaySession]:
    query = db.session.query(PlaySession).filter(PlaySession.status != "closed")
    if org_id is not None:
        query = query.filter(PlaySession.org_id == org_id)
    return query.order_by(PlaySession.started_at).all()
