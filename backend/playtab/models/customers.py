from __future__ import annotations

from ..extensions import db
from playtab.time_utils import to_utc_z


class Customer(db.Model):
    """
    Loyalty customer keyed by normalized phone number.

    MULTI-TENANT: Phone numbers are unique per organization, not globally.

    total_seconds is the play time banked toward the next discount;
    redeeming a discount subtracts the threshold from it. Only the
    discount service mutates these two columns.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("org_id", "phone_number", name="uq_customers_org_phone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)

    phone_number = db.Column(db.String(32), nullable=False)
    first_name = db.Column(db.String(128), nullable=True)
    last_name = db.Column(db.String(128), nullable=True)

    total_seconds = db.Column(db.Integer, nullable=False, default=0)
    is_discount_available = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    organization = db.relationship("Organization", backref=db.backref("customers", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "phone_number": self.phone_number,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "total_seconds": self.total_seconds,
            "is_discount_available": self.is_discount_available,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
