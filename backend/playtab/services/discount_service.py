# Overview: Loyalty discount redemption gate.

"""
Discount Redemption Gate

A customer banks play seconds after each normal checkout. Once the banked
total (plus the session being checked out) reaches the organization's
threshold, one checkout may be discounted; redeeming subtracts the
threshold and carries the remainder forward.

RACE SAFETY: apply_discount is a single conditional UPDATE. The
eligibility check sits in the WHERE clause and the new balance/flag are
computed in the SET clause, so two checkouts racing to redeem the same
balance cannot both match; the loser sees rowcount == 0 and gets a
Conflict. There is no read-verify-write window and no compensating write.
"""

from __future__ import annotations

from sqlalchemy import case, update

from ..extensions import db
from ..models import Customer
from ..validation import ConflictError, require_non_negative_seconds
from . import customer_service, settings_service
from .concurrency import run_with_retry


class DiscountConflictError(ConflictError):
    """Raised when a redemption no longer qualifies at apply time."""
    pass


def check_eligible(*, org_id: int, phone_number: str, seconds_to_add) -> bool:
    """
    Read-only eligibility check; safe to call on every checkout render.

    Unknown phone numbers are evaluated as a zero balance without creating
    a customer row.
    """
    seconds = require_non_negative_seconds(seconds_to_add, "seconds_played")
    threshold = settings_service.get_discount_settings(org_id).threshold_seconds

    customer = customer_service.find_customer_by_phone(org_id, phone_number)
    if customer and customer.is_discount_available:
        return True

    banked = customer.total_seconds if customer else 0
    return banked + seconds >= threshold


def apply_discount(*, org_id: int, phone_number: str, seconds_to_add) -> tuple[Customer, int]:
    """
    Redeem one discount atomically.

    Returns:
        (customer, discount_rate_bps)

    Raises:
        DiscountConflictError: balance no longer reaches the threshold
    """
    seconds = require_non_negative_seconds(seconds_to_add, "seconds_played")
    settings = settings_service.get_discount_settings(org_id)
    threshold = settings.threshold_seconds

    def _op():
        customer = customer_service.get_or_create_customer(org_id, phone_number)

        remainder = Customer.total_seconds + seconds - threshold
        new_total = case((remainder > 0, remainder), else_=0)

        result = db.session.execute(
            update(Customer)
            .where(
                Customer.id == customer.id,
                Customer.org_id == org_id,
                Customer.total_seconds + seconds >= threshold,
            )
            .values(
                total_seconds=new_total,
                is_discount_available=case((new_total >= threshold, True), else_=False),
            )
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            raise DiscountConflictError(
                "Discount is not available for this customer",
                details={"phone_number": customer.phone_number},
            )

        db.session.commit()
        db.session.refresh(customer)
        return customer, settings.rate_bps

    return run_with_retry(_op)


def add_seconds(*, org_id: int, phone_number: str, seconds_played) -> Customer:
    """Bank play time after a normal (non-discounted) checkout."""
    seconds = require_non_negative_seconds(seconds_played, "seconds")
    threshold = settings_service.get_discount_settings(org_id).threshold_seconds

    def _op():
        customer = customer_service.get_or_create_customer(org_id, phone_number)

        new_total = Customer.total_seconds + seconds
        db.session.execute(
            update(Customer)
            .where(Customer.id == customer.id, Customer.org_id == org_id)
            .values(
                total_seconds=new_total,
                is_discount_available=case((new_total >= threshold, True), else_=False),
            )
            .execution_options(synchronize_session=False)
        )

        db.session.commit()
        db.session.refresh(customer)
        return customer

    return run_with_retry(_op)
