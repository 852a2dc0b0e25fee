# Overview: Service-layer operations for a session's item tab and linked stock.

"""
Session Tab Service

WHY: Snacks and drinks sold during play are billed with the session.
Each add is its own row (append-only audit of add events); the UI merges
rows per menu item for display via aggregate_items().

INVENTORY LINK: stock is decremented on add and restored on removal in
the same transaction as the tab change. The decrement is a conditional
UPDATE (stock_qty >= qty), so two adds racing for the last units can't
both succeed.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import update

from ..extensions import db
from ..models import MenuItem, SessionItem
from ..validation import ValidationError, require_positive_qty
from . import station_service
from .concurrency import run_with_retry
from .session_service import get_session_for_update, touch_session
from playtab.time_utils import utcnow


class TabValidationError(ValidationError):
    """Raised when a tab change is not allowed."""
    pass


def add_item(
    *,
    org_id: int,
    session_id: int,
    menu_item_id: int,
    qty: int,
    now: datetime | None = None,
) -> tuple[SessionItem, MenuItem]:
    """
    Append a tab row and take the quantity out of stock.

    Raises:
        SessionNotFoundError / MenuItemNotFoundError
        TabValidationError: session closed, item inactive, insufficient stock
    """
    qty = require_positive_qty(qty)
    now = now or utcnow()

    def _op():
        session = get_session_for_update(org_id, session_id)
        if session.is_closed:
            raise TabValidationError("Session is closed")

        item = station_service.get_menu_item(org_id, menu_item_id)
        if not item.is_active:
            raise TabValidationError("Menu item is inactive")

        result = db.session.execute(
            update(MenuItem)
            .where(
                MenuItem.id == item.id,
                MenuItem.org_id == org_id,
                MenuItem.stock_qty >= qty,
            )
            .values(stock_qty=MenuItem.stock_qty - qty)
            .execution_options(synchronize_session="fetch")
        )
        if not result.rowcount:
            raise TabValidationError(
                "Insufficient stock",
                details={"menu_item_id": item.id, "requested_qty": qty, "stock_qty": item.stock_qty},
            )

        row = SessionItem(
            session_id=session.id,
            menu_item_id=item.id,
            name_snapshot=item.name,
            price_cents_snapshot=item.price_cents,
            qty=qty,
            created_at=now,
        )
        db.session.add(row)
        touch_session(session, now)

        db.session.commit()
        return row, item

    return run_with_retry(_op)


def remove_qty(
    *,
    org_id: int,
    session_id: int,
    menu_item_id: int,
    qty: int,
    now: datetime | None = None,
) -> int:
    """
    Remove up to qty units of a menu item from the tab, newest rows first.

    Whole rows are deleted until the remainder fits inside one row, which
    is decremented. Returns the quantity actually removed; a short removal
    (less held than asked) is not an error.
    """
    qty = require_positive_qty(qty)
    now = now or utcnow()

    def _op():
        session = get_session_for_update(org_id, session_id)
        if session.is_closed:
            raise TabValidationError("Session is closed")

        rows = (
            db.session.query(SessionItem)
            .filter_by(session_id=session.id, menu_item_id=menu_item_id)
            .order_by(SessionItem.created_at.desc(), SessionItem.id.desc())
            .all()
        )

        held = sum(row.qty or 0 for row in rows)
        remaining = min(qty, held)
        removed = 0

        for row in rows:
            if remaining <= 0:
                break
            row_qty = row.qty or 0
            if row_qty <= 0:
                continue
            if remaining >= row_qty:
                db.session.delete(row)
                remaining -= row_qty
                removed += row_qty
            else:
                row.qty = row_qty - remaining
                removed += remaining
                remaining = 0

        if removed:
            db.session.execute(
                update(MenuItem)
                .where(MenuItem.id == menu_item_id, MenuItem.org_id == org_id)
                .values(stock_qty=MenuItem.stock_qty + removed)
                .execution_options(synchronize_session="fetch")
            )
            touch_session(session, now)

        db.session.commit()
        return removed

    return run_with_retry(_op)


def list_items(session_id: int) -> list[SessionItem]:
    return (
        db.session.query(SessionItem)
        .filter_by(session_id=session_id)
        .order_by(SessionItem.created_at, SessionItem.id)
        .all()
    )


def items_subtotal_cents(items: list[SessionItem]) -> int:
    return sum(item.line_total_cents for item in items)


def aggregate_items(items: list[SessionItem]) -> list[dict]:
    """Merge tab rows per (menu item, unit price) for display."""
    merged: dict[tuple, dict] = {}
    for item in items:
        key = (item.menu_item_id, item.price_cents_snapshot)
        entry = merged.get(key)
        if entry is None:
            entry = {
                "menu_item_id": item.menu_item_id,
                "name": item.name_snapshot,
                "price_cents": item.price_cents_snapshot,
                "qty": 0,
                "line_total_cents": 0,
            }
            merged[key] = entry
        entry["qty"] += item.qty
        entry["line_total_cents"] += item.line_total_cents
    return list(merged.values())
