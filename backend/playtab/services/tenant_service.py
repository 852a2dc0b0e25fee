"""
Multi-Tenant Service: Organization lookup and bootstrap

WHY: Every record in the session core is scoped by org_id. Routes resolve
the caller's organization once (decorators.require_org) and pass org_id
into every service call; services never read it from request context.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Organization
from ..validation import NotFoundError, ConflictError


class TenantAccessError(NotFoundError):
    """Raised when an organization is missing or inactive."""
    pass


def get_organization(org_id: int) -> Organization:
    org = db.session.query(Organization).filter_by(id=org_id).first()
    if not org:
        raise TenantAccessError("Organization not found")
    return org


def validate_org_active(org_id: int) -> Organization:
    """
    Ensure organization exists and is active.

    SECURITY: Inactive organizations are treated the same as missing ones.
    """
    org = get_organization(org_id)
    if not org.is_active:
        raise TenantAccessError("Organization not found")
    return org


def create_organization(name: str, code: str | None = None) -> Organization:
    if code and db.session.query(Organization).filter_by(code=code).first():
        raise ConflictError(f"Organization code '{code}' already exists")

    org = Organization(
        name=name,
        code=code,
        is_active=True,
        discount_threshold_seconds=current_app.config.get("DEFAULT_DISCOUNT_THRESHOLD_HOURS", 20) * 3600,
        discount_rate_bps=current_app.config.get("DEFAULT_DISCOUNT_RATE_BPS", 2000),
    )
    db.session.add(org)
    db.session.commit()
    return org
