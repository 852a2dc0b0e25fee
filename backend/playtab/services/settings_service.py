# Overview: Per-organization loyalty discount settings.

from __future__ import annotations

import math
from dataclasses import dataclass

from ..extensions import db
from ..validation import ValidationError
from .tenant_service import get_organization


@dataclass(frozen=True)
class DiscountSettings:
    threshold_seconds: int
    rate_bps: int

    @property
    def threshold_hours(self) -> float:
        return self.threshold_seconds / 3600

    @property
    def rate(self) -> float:
        return self.rate_bps / 10000

    def to_dict(self) -> dict:
        return {
            "discount_threshold_seconds": self.threshold_seconds,
            "discount_threshold_hours": self.threshold_hours,
            "discount_rate_bps": self.rate_bps,
            "discount_rate": self.rate,
        }


def hours_to_seconds(hours: float) -> int:
    """Convert hours (as entered at the front desk) to seconds for storage."""
    return int(round(hours * 3600))


def get_discount_settings(org_id: int) -> DiscountSettings:
    org = get_organization(org_id)
    return DiscountSettings(
        threshold_seconds=org.discount_threshold_seconds,
        rate_bps=org.discount_rate_bps,
    )


def update_discount_settings(*, org_id: int, threshold_hours: float, discount_rate: float) -> DiscountSettings:
    """
    Update the loyalty threshold and discount rate.

    discount_rate is a fraction (0.2 = 20%) and is stored in basis points.
    """
    try:
        threshold_hours = float(threshold_hours)
        discount_rate = float(discount_rate)
    except (TypeError, ValueError):
        raise ValidationError("discount_threshold_hours and discount_rate must be numbers")

    if not math.isfinite(threshold_hours) or threshold_hours <= 0:
        raise ValidationError("discount_threshold_hours must be greater than zero")
    if not 0 <= discount_rate <= 1:
        raise ValidationError("discount_rate must be between 0 and 1")

    org = get_organization(org_id)
    org.discount_threshold_seconds = hours_to_seconds(threshold_hours)
    org.discount_rate_bps = int(round(discount_rate * 10000))
    db.session.commit()

    return get_discount_settings(org_id)
