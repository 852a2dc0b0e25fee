# Overview: Flask API routes for the station board; parses input and returns JSON responses.

from flask import Blueprint, jsonify, g, current_app

from ..decorators import require_org
from ..services import reporting_service
from ..validation import ServiceError, to_http_error


stations_bp = Blueprint("stations", __name__, url_prefix="/api/stations")


@stations_bp.get("/")
@require_org
def list_stations_route():
    """Stations in display order with their open session, if any."""
    try:
        board = reporting_service.list_station_board(g.org_id)
        return jsonify({"stations": board, "count": len(board)})
    except ServiceError as e:
        status, message = to_http_error(e)
        return jsonify({"error": message, "details": e.details}), status
    except Exception:
        current_app.logger.exception("Failed to list stations")
        return jsonify({"error": "Internal server error"}), 500


@stations_bp.get("/<int:station_id>/session")
@require_org
def get_active_session_route(station_id: int):
    try:
        summary = reporting_service.get_active_session(g.org_id, station_id)
        return jsonify({"active_session": summary})
    except ServiceError as e:
        status, message = to_http_error(e)
        return jsonify({"error": message, "details": e.details}), status
    except Exception:
        current_app.logger.exception("Failed to load active session")
        return jsonify({"error": "Internal server error"}), 500
