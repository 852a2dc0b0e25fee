from __future__ import annotations

import math
from typing import Any


PRICING_TIERS = ("solo", "group")

# Maximum tab quantity for a single add/remove request
MAX_ITEM_QTY = 999


class ServiceError(ValueError):
    """Base class for expected, caller-facing failures."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class NotFoundError(ServiceError):
    """404-level: id does not resolve under the given tenant (or precondition)."""
    status_code = 404


class ValidationError(ServiceError):
    """400-level input or precondition problem on an existing entity."""
    status_code = 400


class ConflictError(ServiceError):
    """409-level: state changed concurrently, transition no longer valid."""
    status_code = 409


def to_http_error(exc: BaseException) -> tuple[int, str]:
    if isinstance(exc, ServiceError):
        return exc.status_code, str(exc)
    return 500, "Internal server error"


def require_pricing_tier(value: Any, field: str = "pricing_tier", *, allow_none: bool = False) -> str | None:
    if value is None and allow_none:
        return None
    if not isinstance(value, str) or value.strip().lower() not in PRICING_TIERS:
        raise ValidationError(f"{field} must be one of: {', '.join(PRICING_TIERS)}")
    return value.strip().lower()


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer coercion for request input.

    Rejects bools, floats, decimals-in-strings and scientific notation.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def require_positive_qty(value: Any, field: str = "qty") -> int:
    qty = coerce_int(value, field)
    if qty < 1:
        raise ValidationError(f"{field} must be at least 1")
    if qty > MAX_ITEM_QTY:
        raise ValidationError(f"{field} cannot exceed {MAX_ITEM_QTY}")
    return qty


def require_non_negative_seconds(value: Any, field: str = "seconds") -> int:
    """Seconds may arrive as int, float or numeric string; rounded to whole seconds."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(seconds) or seconds < 0:
        raise ValidationError(f"{field} must be zero or greater")
    return int(round(seconds))
