# Overview: Flask API routes for loyalty customers and discount redemption.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_org
from ..services import customer_service, discount_service
from ..services.discount_service import DiscountConflictError
from ..validation import ServiceError, to_http_error


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


def _error_response(e: ServiceError):
    status, message = to_http_error(e)
    return jsonify({"error": message, "details": e.details}), status


@customers_bp.get("/")
@require_org
def list_customers_route():
    customers = customer_service.list_customers(g.org_id)
    return jsonify({"customers": [c.to_dict() for c in customers], "count": len(customers)})


@customers_bp.post("/")
@require_org
def create_customer_route():
    """Body: phone_number, first_name (optional), last_name (optional)"""
    data = request.get_json(silent=True) or {}
    try:
        customer = customer_service.create_customer(
            org_id=g.org_id,
            phone_number=data.get("phone_number"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
        )
        return jsonify({"customer": customer.to_dict()}), 201
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/<int:customer_id>")
@require_org
def get_customer_route(customer_id: int):
    try:
        customer = customer_service.get_customer(g.org_id, customer_id)
        return jsonify({"customer": customer.to_dict()})
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.patch("/<int:customer_id>")
@require_org
def update_customer_route(customer_id: int):
    data = request.get_json(silent=True) or {}
    patch = {k: data[k] for k in ("phone_number", "first_name", "last_name") if k in data}
    if not patch:
        return jsonify({"error": "No updatable fields provided"}), 400

    try:
        customer = customer_service.update_customer(org_id=g.org_id, customer_id=customer_id, patch=patch)
        return jsonify({"customer": customer.to_dict()})
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.delete("/<int:customer_id>")
@require_org
def delete_customer_route(customer_id: int):
    try:
        customer_service.delete_customer(org_id=g.org_id, customer_id=customer_id)
        return jsonify({"deleted": True, "id": customer_id})
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# DISCOUNTS
# =============================================================================

@customers_bp.get("/<phone_number>/discounts/check")
@require_org
def check_discount_route(phone_number: str):
    """Query: seconds_played (seconds of the session being checked out)"""
    try:
        eligible = discount_service.check_eligible(
            org_id=g.org_id,
            phone_number=phone_number,
            seconds_to_add=request.args.get("seconds_played", "0"),
        )
        return jsonify({"phone_number": phone_number, "eligible": eligible})
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to check discount eligibility")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.post("/<phone_number>/discounts/apply")
@require_org
def apply_discount_route(phone_number: str):
    """Body: seconds_played"""
    data = request.get_json(silent=True) or {}
    try:
        customer, rate_bps = discount_service.apply_discount(
            org_id=g.org_id,
            phone_number=phone_number,
            seconds_to_add=data.get("seconds_played"),
        )
        return jsonify({
            "customer": customer.to_dict(),
            "discount_rate_bps": rate_bps,
            "discount_rate": rate_bps / 10000,
        })
    except DiscountConflictError as e:
        current_app.logger.warning("Discount redemption rejected for org %s: %s", g.org_id, e)
        return _error_response(e)
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to apply discount")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.post("/<phone_number>/seconds")
@require_org
def add_seconds_route(phone_number: str):
    """Body: seconds (played time to bank after a normal checkout)"""
    data = request.get_json(silent=True) or {}
    try:
        customer = discount_service.add_seconds(
            org_id=g.org_id,
            phone_number=phone_number,
            seconds_played=data.get("seconds"),
        )
        return jsonify({"customer": customer.to_dict()})
    except ServiceError as e:
        return _error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add customer seconds")
        return jsonify({"error": "Internal server error"}), 500
