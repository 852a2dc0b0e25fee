# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import tenant_service
from .services.tenant_service import TenantAccessError


def require_org(f):
    """
    Establish tenant context from the X-Org-Id header.

    Identity is resolved upstream; the session core only needs to know
    which organization a request acts for. Sets g.org_id.

    Returns 401 if the header is missing, malformed, or names an unknown
    or inactive organization.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = request.headers.get("X-Org-Id", "").strip()
        if not raw.isdigit():
            return jsonify({"error": "Organization context required"}), 401

        try:
            org = tenant_service.validate_org_active(int(raw))
        except TenantAccessError:
            return jsonify({"error": "Invalid organization context"}), 401

        g.org_id = org.id
        return f(*args, **kwargs)

    return decorated_function
