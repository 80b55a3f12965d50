"""Domain models for th_promo — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime

from src.th_common.enums import PromoRejection


@dataclass
class PromoCode:
    id: str
    code: str
    name: str
    description: str | None
    type: str                 # PromoType value
    value: int                # whole percent for percentage, cents for fixed_amount
    is_active: bool
    start_date: datetime | None
    end_date: datetime | None
    usage_limit: int | None
    usage_count: int
    created_by: str | None
    created_at: datetime
    updated_at: datetime


@dataclass
class PromoValidation:
    """Outcome of validating a code against an order total.

    For free_shipping the discount is 0 here; the caller substitutes the
    actual delivery fee.
    """

    valid: bool
    message: str
    reason: PromoRejection | None = None
    promo: PromoCode | None = None
    discount_cents: int = 0
    discount_type: str | None = None
    description: str | None = None
