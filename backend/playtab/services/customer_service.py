# Overview: Loyalty customer records keyed by normalized phone number.

from __future__ import annotations

import re

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Customer
from ..validation import NotFoundError, ValidationError, ConflictError
from .concurrency import run_with_retry


class CustomerNotFoundError(NotFoundError):
    pass


class CustomerValidationError(ValidationError):
    pass


class CustomerConflictError(ConflictError):
    pass


_NON_DIGITS = re.compile(r"\D")


def normalize_phone_number(phone: str | None) -> str:
    """
    Reduce a phone number to its canonical digit form.

    Strips separators ("555-123-4567", "(555) 123.4567") and a leading US
    country code when 11 digits start with 1, so the same person never
    gets two customer rows.
    """
    if not phone or not isinstance(phone, str):
        return ""
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits


def require_phone_number(phone: str | None) -> str:
    normalized = normalize_phone_number(phone)
    if not normalized:
        raise CustomerValidationError("phone_number is required")
    return normalized


def find_customer_by_phone(org_id: int, phone: str | None) -> Customer | None:
    normalized = require_phone_number(phone)
    return db.session.query(Customer).filter_by(org_id=org_id, phone_number=normalized).first()


def get_or_create_customer(org_id: int, phone: str | None) -> Customer:
    """
    Lazily create the customer on first reference. Does not commit.

    Must be the first write of the caller's unit: a concurrent create for
    the same phone loses on uq_customers_org_phone, the unit is rolled
    back and the winner's row is used instead.
    """
    normalized = require_phone_number(phone)
    customer = db.session.query(Customer).filter_by(org_id=org_id, phone_number=normalized).first()
    if customer:
        return customer

    customer = Customer(org_id=org_id, phone_number=normalized, total_seconds=0, is_discount_available=False)
    db.session.add(customer)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        customer = db.session.query(Customer).filter_by(org_id=org_id, phone_number=normalized).one()
    return customer


def list_customers(org_id: int) -> list[Customer]:
    return (
        db.session.query(Customer)
        .filter_by(org_id=org_id)
        .order_by(Customer.created_at, Customer.id)
        .all()
    )


def get_customer(org_id: int, customer_id: int) -> Customer:
    customer = db.session.query(Customer).filter_by(id=customer_id, org_id=org_id).first()
    if not customer:
        raise CustomerNotFoundError("Customer not found")
    return customer


def create_customer(
    *,
    org_id: int,
    phone_number: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> Customer:
    normalized = require_phone_number(phone_number)

    def _op():
        if db.session.query(Customer).filter_by(org_id=org_id, phone_number=normalized).first():
            raise CustomerConflictError("A customer with this phone number already exists")

        customer = Customer(
            org_id=org_id,
            phone_number=normalized,
            first_name=first_name,
            last_name=last_name,
            total_seconds=0,
            is_discount_available=False,
        )
        db.session.add(customer)
        try:
            db.session.flush()
        except IntegrityError:
            raise CustomerConflictError("A customer with this phone number already exists")
        db.session.commit()
        return customer

    return run_with_retry(_op)


def update_customer(*, org_id: int, customer_id: int, patch: dict) -> Customer:
    """Update contact fields. Loyalty counters are owned by the discount service."""
    def _op():
        customer = get_customer(org_id, customer_id)

        if "first_name" in patch:
            customer.first_name = patch["first_name"]
        if "last_name" in patch:
            customer.last_name = patch["last_name"]
        if "phone_number" in patch:
            normalized = require_phone_number(patch["phone_number"])
            clash = (
                db.session.query(Customer)
                .filter(Customer.org_id == org_id, Customer.phone_number == normalized, Customer.id != customer.id)
                .first()
            )
            if clash:
                raise CustomerConflictError("A customer with this phone number already exists")
            customer.phone_number = normalized

        db.session.commit()
        return customer

    return run_with_retry(_op)


def delete_customer(*, org_id: int, customer_id: int) -> None:
    def _op():
        customer = get_customer(org_id, customer_id)
        db.session.delete(customer)
        db.session.commit()

    run_with_retry(_op)
