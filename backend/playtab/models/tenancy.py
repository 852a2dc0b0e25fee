from __future__ import annotations

from ..extensions import db
from playtab.time_utils import to_utc_z


class Organization(db.Model):
    """
    Multi-tenant root: every venue operator is an Organization.

    WHY: All stations, menu items, sessions and customers belong to exactly
    one organization. No data may cross organization boundaries.

    Loyalty settings live here because the discount threshold and rate are
    per-venue decisions.
    """
    __tablename__ = "organizations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(32), nullable=True, unique=True, index=True)  # Short code for lookups

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    # Loyalty: cumulative play time that earns one discounted checkout
    discount_threshold_seconds = db.Column(db.Integer, nullable=False, default=20 * 3600)
    # Basis points (e.g., 2000 = 20%)
    discount_rate_bps = db.Column(db.Integer, nullable=False, default=2000)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "is_active": self.is_active,
            "discount_threshold_seconds": self.discount_threshold_seconds,
            "discount_rate_bps": self.discount_rate_bps,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
