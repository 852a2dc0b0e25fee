# Overview: Read-only station directory and menu lookups used by the session core.

"""
Station & Menu Directory

Station and menu CRUD live outside the session core. The core only needs
tenant-scoped reads: a station's rates/type/enabled flag at start, transfer
and close time, and a menu item's name/price/stock/active flag when a tab
row is added. A foreign-tenant id behaves exactly like a missing one.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Station, MenuItem
from ..validation import NotFoundError


class StationNotFoundError(NotFoundError):
    """Raised when a station id does not resolve under the tenant."""
    pass


class MenuItemNotFoundError(NotFoundError):
    """Raised when a menu item id does not resolve under the tenant."""
    pass


def get_station(org_id: int, station_id: int, *, message: str = "Station not found") -> Station:
    station = db.session.query(Station).filter_by(id=station_id, org_id=org_id).first()
    if not station:
        raise StationNotFoundError(message)
    return station


def list_stations(org_id: int) -> list[Station]:
    return (
        db.session.query(Station)
        .filter_by(org_id=org_id)
        .order_by(Station.sort_order, Station.id)
        .all()
    )


def get_menu_item(org_id: int, menu_item_id: int) -> MenuItem:
    item = db.session.query(MenuItem).filter_by(id=menu_item_id, org_id=org_id).first()
    if not item:
        raise MenuItemNotFoundError("Menu item not found")
    return item
