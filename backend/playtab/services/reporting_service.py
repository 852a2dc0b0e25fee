# Overview: Read models for live sessions, the station board and session history.

"""
Session Reporting

Nothing here writes. Live figures are derived on every read from the
session's open interval plus its frozen segments; clients poll after a
mutation instead of receiving pushes.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ..extensions import db
from ..models import PlaySession, SessionItem
from . import segment_service, station_service, tab_service
from .billing import open_interval_seconds, time_charge_cents, round_cents
from playtab.time_utils import utcnow, to_utc_z


def session_summary(session: PlaySession, now: datetime | None = None) -> dict:
    """
    Live view of a session: clock, running charge, tab and totals.

    For an open session the running charge is the sum of frozen segment
    amounts plus the unrounded open-interval charge, rounded once.
    """
    now = now or utcnow()
    segments = segment_service.list_segments(session.id)
    items = tab_service.list_items(session.id)

    segment_seconds = sum(seg.effective_seconds for seg in segments)
    segment_cents = sum(seg.time_amount_cents for seg in segments)

    if session.is_closed:
        current_seconds = 0
        time_charge = session.total_amount_cents or segment_cents
    else:
        current_seconds = open_interval_seconds(session, now)
        open_charge = time_charge_cents(current_seconds, session.rate_hourly_snapshot_cents)
        time_charge = round_cents(Decimal(segment_cents) + open_charge)

    items_subtotal = tab_service.items_subtotal_cents(items)

    return {
        "session": session.to_dict(),
        "current_interval_seconds": current_seconds,
        "effective_seconds": segment_seconds + current_seconds,
        "time_charge_cents": time_charge,
        "items_subtotal_cents": items_subtotal,
        "grand_total_cents": time_charge + items_subtotal,
        "segments": [seg.to_dict() for seg in segments],
        "items": [item.to_dict() for item in items],
        "items_summary": tab_service.aggregate_items(items),
    }


def get_active_session(org_id: int, station_id: int, now: datetime | None = None) -> dict | None:
    station_service.get_station(org_id, station_id)
    session = (
        db.session.query(PlaySession)
        .filter(
            PlaySession.org_id == org_id,
            PlaySession.station_id == station_id,
            PlaySession.status != "closed",
        )
        .first()
    )
    if not session:
        return None
    return session_summary(session, now)


def list_station_board(org_id: int, now: datetime | None = None) -> list[dict]:
    """Stations in display order, each with its open session summary (or None)."""
    now = now or utcnow()
    open_sessions = {
        s.station_id: s
        for s in db.session.query(PlaySession)
        .filter(PlaySession.org_id == org_id, PlaySession.status != "closed")
        .all()
    }

    board = []
    for station in station_service.list_stations(org_id):
        session = open_sessions.get(station.id)
        row = station.to_dict()
        row["active_session"] = session_summary(session, now) if session else None
        board.append(row)
    return board


def list_history(org_id: int, limit: int = 200) -> list[dict]:
    """Closed sessions, most recently closed first."""
    closed = (
        db.session.query(PlaySession)
        .filter(PlaySession.org_id == org_id, PlaySession.status == "closed")
        .order_by(PlaySession.closed_at.desc(), PlaySession.id.desc())
        .limit(limit)
        .all()
    )
    if not closed:
        return []

    session_ids = [s.id for s in closed]
    items_by_session: dict[int, list[SessionItem]] = {}
    for item in (
        db.session.query(SessionItem)
        .filter(SessionItem.session_id.in_(session_ids))
        .order_by(SessionItem.created_at, SessionItem.id)
        .all()
    ):
        items_by_session.setdefault(item.session_id, []).append(item)

    history = []
    for session in closed:
        segments = segment_service.list_segments(session.id)
        items = items_by_session.get(session.id, [])
        time_charge = session.total_amount_cents or 0
        items_subtotal = tab_service.items_subtotal_cents(items)
        station = session.station

        history.append({
            "id": session.id,
            "station_id": session.station_id,
            "station_name": station.name if station else None,
            "station_type": station.station_type if station else None,
            "pricing_tier": session.pricing_tier,
            "opened_at": to_utc_z(session.opened_at),
            "closed_at": to_utc_z(session.closed_at),
            "total_paused_seconds": sum(seg.paused_seconds for seg in segments),
            "effective_seconds": sum(seg.effective_seconds for seg in segments),
            "time_charge_cents": time_charge,
            "items_subtotal_cents": items_subtotal,
            "grand_total_cents": time_charge + items_subtotal,
            "item_count": sum(item.qty for item in items),
            "segments": [seg.to_dict() for seg in segments],
            "items": [item.to_dict() for item in items],
        })
    return history
