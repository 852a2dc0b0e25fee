from __future__ import annotations

from ..extensions import db
from playtab.time_utils import to_utc_z


STATION_TYPES = ("pool", "gaming", "foosball")


class Station(db.Model):
    """
    A timed-use station (pool table, gaming console, foosball table).

    Owned by station CRUD; the session core only reads it. Station types
    without a group price carry the same rate in both columns.
    """
    __tablename__ = "stations"
    __table_args__ = (
        db.UniqueConstraint("org_id", "name", name="uq_stations_org_name"),
        db.Index("ix_stations_org_sort", "org_id", "sort_order"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    station_type = db.Column(db.String(32), nullable=False)  # pool, gaming, foosball

    # Hourly rates in cents
    rate_solo_hourly_cents = db.Column(db.Integer, nullable=False, default=0)
    rate_group_hourly_cents = db.Column(db.Integer, nullable=False, default=0)

    is_enabled = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    organization = db.relationship("Organization", backref=db.backref("stations", lazy=True))

    def rate_for_tier(self, pricing_tier: str) -> int:
        if pricing_tier == "group":
            return self.rate_group_hourly_cents
        return self.rate_solo_hourly_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "name": self.name,
            "station_type": self.station_type,
            "rate_solo_hourly_cents": self.rate_solo_hourly_cents,
            "rate_group_hourly_cents": self.rate_group_hourly_cents,
            "is_enabled": self.is_enabled,
            "sort_order": self.sort_order,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class MenuItem(db.Model):
    """
    Sellable menu item with a simple on-hand counter.

    Stock is decremented/restored by the session tab in the same transaction
    as the tab mutation.
    """
    __tablename__ = "menu_items"
    __table_args__ = (
        db.Index("ix_menu_items_org_active", "org_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=True)
    price_cents = db.Column(db.Integer, nullable=False)
    stock_qty = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "name": self.name,
            "category": self.category,
            "price_cents": self.price_cents,
            "stock_qty": self.stock_qty,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
