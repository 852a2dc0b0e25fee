# Overview: Flask API routes for play sessions; parses input and returns JSON responses.

"""
Play Session Routes

Every route acts for g.org_id (see require_org). Expected failures map to
404 (not found), 400 (validation) and 409 (conflict); anything else is
logged and answered with a generic 500.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_org
from ..services import (
    checkout_service,
    reporting_service,
    session_service,
    tab_service,
    transfer_service,
)
from ..services.checkout_service import SegmentTierOverride
from ..validation import ServiceError, ValidationError, coerce_int, to_http_error
from playtab.time_utils import parse_iso_datetime


sessions_bp = Blueprint("sessions", __name__, url_prefix="/api/sessions")


def _error_response(e: ServiceError):
    status, message = to_http_error(e)
    return jsonify({"error": message, "details": e.details}), status


def _summary(session) -> dict:
    return reporting_service.session_summary(session)


@sessions_bp.post("/")
@require_org
def start_session_route():
    """
    Start a session on a station (idempotent per station).

    Body: station_id, pricing_tier ("solo" | "group"), started_at (optional ISO-8601)
    """
    data = request.get_json(silent=True) or {}
    if not data.get("station_id"):
        return jsonify({"error": "station_id is required"}), 400

    try:
        station_id = coerce_int(data.get("station_id"), "station_id")
        try:
            started_at = parse_iso_datetime(data.get("started_at"))
        except (AttributeError, TypeError, ValueError):
            raise ValidationError("Invalid started_at")

        session = session_service.start_session(
            org_id=g.org_id,
            station_id=station_id,
            pricing_tier=data.get("pricing_tier", "solo"),
            started_at=started_at,
        )
        return jsonify(_summary(session)), 201
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to start session")
        return jsonify({"error": "Internal server error"}), 500


@sessions_bp.get("/<int:session_id>")
@require_org
def get_session_route(session_id: int):
    try:
        session = session_service.get_session(g.org_id, session_id)
        return jsonify(_summary(session))
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load session")
        return jsonify({"error": "Internal server error"}), 500


@sessions_bp.post("/<int:session_id>/pause")
@require_org
def pause_session_route(session_id: int):
    try:
        session = session_service.pause_session(org_id=g.org_id, session_id=session_id)
        return jsonify(_summary(session))
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to pause session")
        return jsonify({"error": "Internal server error"}), 500


@sessions_bp.post("/<int:session_id>/resume")
@require_org
def resume_session_route(session_id: int):
    try:
        session = session_service.resume_session(org_id=g.org_id, session_id=session_id)
        return jsonify(_summary(session))
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to resume session")
        return jsonify({"error": "Internal server error"}), 500


@sessions_bp.post("/<int:session_id>/transfer")
@require_org
def transfer_session_route(session_id: int):
    """
    Move a session to another station.

    Body: destination_station_id, ending_tier (optional), next_tier (optional)
    """
    data = request.get_json(silent=True) or {}
    if not data.get("destination_station_id"):
        return jsonify({"error": "destination_station_id is required"}), 400

    try:
        session = transfer_service.transfer_session(
            org_id=g.org_id,
            session_id=session_id,
            destination_station_id=coerce_int(data.get("destination_station_id"), "destination_station_id"),
            ending_tier=data.get("ending_tier"),
            next_tier=data.get("next_tier"),
        )
        return jsonify(_summary(session))
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to transfer session")
        return jsonify({"error": "Internal server error"}), 500


@sessions_bp.post("/<int:session_id>/close")
@require_org
def close_session_route(session_id: int):
    """
    Close a session (idempotent).

    Body: current_segment_tier (optional),
          segment_tiers (optional list of {segment_id, pricing_tier})
    """
    data = request.get_json(silent=True) or {}
    raw_overrides = data.get("segment_tiers") or []
    if not isinstance(raw_overrides, list):
        return jsonify({"error": "segment_tiers must be a list"}), 400

    try:
        overrides = []
        for entry in raw_overrides:
            if not isinstance(entry, dict) or "segment_id" not in entry:
                raise ValidationError("Each segment_tiers entry needs segment_id and pricing_tier")
            overrides.append(SegmentTierOverride(
                segment_id=coerce_int(entry["segment_id"], "segment_id"),
                pricing_tier=entry.get("pricing_tier"),
            ))

        session = checkout_service.close_session(
            org_id=g.org_id,
            session_id=session_id,
            current_segment_tier=data.get("current_segment_tier"),
            segment_tier_overrides=overrides,
        )
        return jsonify(_summary(session))
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to close session")
        return jsonify({"error": "Internal server error"}), 500


@sessions_bp.post("/<int:session_id>/items")
@require_org
def add_item_route(session_id: int):
    """Body: menu_item_id, qty"""
    data = request.get_json(silent=True) or {}
    if not data.get("menu_item_id"):
        return jsonify({"error": "menu_item_id is required"}), 400

    try:
        row, menu_item = tab_service.add_item(
            org_id=g.org_id,
            session_id=session_id,
            menu_item_id=coerce_int(data.get("menu_item_id"), "menu_item_id"),
            qty=data.get("qty", 1),
        )
        return jsonify({"item": row.to_dict(), "menu_item": menu_item.to_dict()}), 201
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add session item")
        return jsonify({"error": "Internal server error"}), 500


@sessions_bp.delete("/<int:session_id>/items/<int:menu_item_id>")
@require_org
def remove_item_route(session_id: int, menu_item_id: int):
    """Query: qty (default 1). A short removal still answers 200."""
    try:
        removed = tab_service.remove_qty(
            org_id=g.org_id,
            session_id=session_id,
            menu_item_id=menu_item_id,
            qty=request.args.get("qty", "1"),
        )
        return jsonify({"removed_qty": removed, "menu_item_id": menu_item_id})
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to remove session item")
        return jsonify({"error": "Internal server error"}), 500


@sessions_bp.get("/history")
@require_org
def list_history_route():
    limit = request.args.get("limit", 200, type=int)
    try:
        history = reporting_service.list_history(g.org_id, limit=max(1, min(limit, 500)))
        return jsonify({"sessions": history, "count": len(history)})
    except Exception:
        current_app.logger.exception("Failed to list session history")
        return jsonify({"error": "Internal server error"}), 500
