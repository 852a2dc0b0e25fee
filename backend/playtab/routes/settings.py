# Overview: Flask API routes for organization settings.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_org
from ..services import settings_service
from ..validation import ServiceError, to_http_error


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/discount")
@require_org
def get_discount_settings_route():
    try:
        return jsonify(settings_service.get_discount_settings(g.org_id).to_dict())
    except ServiceError as e:
        status, message = to_http_error(e)
        return jsonify({"error": message}), status
    except Exception:
        current_app.logger.exception("Failed to load discount settings")
        return jsonify({"error": "Internal server error"}), 500


@settings_bp.put("/discount")
@require_org
def update_discount_settings_route():
    """Body: discount_threshold_hours, discount_rate (fraction, 0.2 = 20%)"""
    data = request.get_json(silent=True) or {}
    try:
        settings = settings_service.update_discount_settings(
            org_id=g.org_id,
            threshold_hours=data.get("discount_threshold_hours"),
            discount_rate=data.get("discount_rate"),
        )
        return jsonify(settings.to_dict())
    except ServiceError as e:
        status, message = to_http_error(e)
        return jsonify({"error": message, "details": e.details}), status
    except Exception:
        current_app.logger.exception("Failed to update discount settings")
        return jsonify({"error": "Internal server error"}), 500
