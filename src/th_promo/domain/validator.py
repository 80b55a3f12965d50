"""Promo code rules: eligibility, discount amount, admin status, definitions.

Eligibility checks run in a fixed order and the first failure wins:
    not found -> inactive -> not yet started -> expired -> usage limit reached
Rejections are returned as values (PromoValidation.valid = False), never raised,
so the storefront can show the message as-is.
"""

import re
from datetime import datetime

from src.th_common.datetime_utils import as_utc, utc_now
from src.th_common.enums import PromoRejection, PromoStatus, PromoType
from src.th_common.errors import InvalidPromoCodeError
from src.th_common.money import cents_to_display, percent_of
from src.th_promo.domain.models import PromoCode, PromoValidation

CODE_PATTERN = re.compile(r"^[A-Z0-9]+$")

REJECTION_MESSAGES: dict[PromoRejection, str] = {
    PromoRejection.NOT_FOUND: "Invalid promo code",
    PromoRejection.INACTIVE: "This promo code is no longer active",
    PromoRejection.NOT_STARTED: "This promo code is not yet active",
    PromoRejection.EXPIRED: "This promo code has expired",
    PromoRejection.LIMIT_REACHED: "This promo code has reached its usage limit",
}


def normalize_code(code: str) -> str:
    return code.strip().upper()


def rejection_for(promo: PromoCode | None, now: datetime) -> PromoRejection | None:
    if promo is None:
        return PromoRejection.NOT_FOUND
    if not promo.is_active:
        return PromoRejection.INACTIVE
    if promo.start_date is not None and now < as_utc(promo.start_date):
        return PromoRejection.NOT_STARTED
    if promo.end_date is not None and now > as_utc(promo.end_date):
        return PromoRejection.EXPIRED
    if promo.usage_limit is not None and promo.usage_count >= promo.usage_limit:
        return PromoRejection.LIMIT_REACHED
    return None


def compute_discount(promo: PromoCode, order_total_cents: int) -> int:
    if promo.type == PromoType.PERCENTAGE.value:
        return percent_of(order_total_cents, promo.value)
    if promo.type == PromoType.FIXED_AMOUNT.value:
        return min(promo.value, order_total_cents)
    # free_shipping: resolved by the caller against the real delivery fee
    return 0


def describe(promo: PromoCode) -> str:
    if promo.type == PromoType.FREE_SHIPPING.value:
        return "Free shipping"
    if promo.type == PromoType.PERCENTAGE.value:
        return f"{promo.value}% off"
    return f"{cents_to_display(promo.value)} off"


def validate(
    promo: PromoCode | None,
    order_total_cents: int,
    now: datetime | None = None,
) -> PromoValidation:
    now = as_utc(now or utc_now())
    reason = rejection_for(promo, now)
    if promo is None or reason is not None:
        reason = reason or PromoRejection.NOT_FOUND
        return PromoValidation(valid=False, reason=reason, message=REJECTION_MESSAGES[reason])

    return PromoValidation(
        valid=True,
        message="Promo code applied",
        promo=promo,
        discount_cents=compute_discount(promo, order_total_cents),
        discount_type=promo.type,
        description=describe(promo),
    )


def calculated_status(promo: PromoCode, now: datetime | None = None) -> PromoStatus:
    """Admin-facing status. Note expiry is checked before start date here."""
    now = as_utc(now or utc_now())
    if not promo.is_active:
        return PromoStatus.INACTIVE
    if promo.end_date is not None and as_utc(promo.end_date) < now:
        return PromoStatus.EXPIRED
    if promo.start_date is not None and as_utc(promo.start_date) > now:
        return PromoStatus.SCHEDULED
    if promo.usage_limit is not None and promo.usage_count >= promo.usage_limit:
        return PromoStatus.LIMIT_REACHED
    return PromoStatus.ACTIVE


def check_definition(
    code: str,
    promo_type: str,
    value: int,
    start_date: datetime | None,
    end_date: datetime | None,
) -> None:
    """Validate an admin-supplied promo definition.

    Raises:
        InvalidPromoCodeError: first rule that fails.
    """
    if not CODE_PATTERN.match(code):
        raise InvalidPromoCodeError("Promo code must be uppercase alphanumeric characters only")
    valid_types = [t.value for t in PromoType]
    if promo_type not in valid_types:
        raise InvalidPromoCodeError(f"Invalid type. Must be one of: {', '.join(valid_types)}")
    if promo_type == PromoType.PERCENTAGE.value and not (0 <= value <= 100):
        raise InvalidPromoCodeError("Percentage value must be between 0 and 100")
    if promo_type == PromoType.FIXED_AMOUNT.value and value < 0:
        raise InvalidPromoCodeError("Fixed amount must be positive")
    if start_date is not None and end_date is not None and as_utc(start_date) >= as_utc(end_date):
        raise InvalidPromoCodeError("Start date must be before end date")
