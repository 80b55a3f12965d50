"""Cart totals: subtotal, tiered delivery fee, sales tax, total.

Delivery fee (delivery only; pickup is always free):

    subtotal     any bulk item   fee
    < $150       yes             $100
    < $150       no              $50
    >= $150      yes             $50
    >= $150      no              $0

Tax is 8.25% of the item subtotal. The delivery fee is not taxed.
An empty cart totals zero, delivery included.
Inputs are assumed validated by the caller (non-negative prices, qty >= 1).
"""

from collections.abc import Sequence

from src.th_cart.domain.constants import (
    BULK_OVER_THRESHOLD_FEE_CENTS,
    BULK_UNDER_THRESHOLD_FEE_CENTS,
    FREE_DELIVERY_THRESHOLD_CENTS,
    NORMAL_OVER_THRESHOLD_FEE_CENTS,
    NORMAL_UNDER_THRESHOLD_FEE_CENTS,
    TAX_RATE_BPS,
)
from src.th_cart.domain.models import CartLine, CartTotals
from src.th_common.enums import DeliveryMethod, PromoType
from src.th_common.money import apply_rate_bps, cents_to_display


def delivery_fee(subtotal_cents: int, has_bulk_items: bool, delivery_method: str) -> int:
    if delivery_method != DeliveryMethod.DELIVERY.value:
        return 0
    if subtotal_cents < FREE_DELIVERY_THRESHOLD_CENTS:
        return BULK_UNDER_THRESHOLD_FEE_CENTS if has_bulk_items else NORMAL_UNDER_THRESHOLD_FEE_CENTS
    return BULK_OVER_THRESHOLD_FEE_CENTS if has_bulk_items else NORMAL_OVER_THRESHOLD_FEE_CENTS


def compute_totals(
    lines: Sequence[CartLine],
    delivery_method: str = DeliveryMethod.DELIVERY.value,
) -> CartTotals:
    subtotal = sum(line.line_total_cents for line in lines)
    has_bulk = any(line.is_bulk for line in lines)
    has_normal = any(not line.is_bulk for line in lines)

    # Nothing to deliver, nothing to charge
    fee = delivery_fee(subtotal, has_bulk, delivery_method) if lines else 0
    tax = apply_rate_bps(subtotal, TAX_RATE_BPS)

    return CartTotals(
        subtotal_cents=subtotal,
        delivery_fee_cents=fee,
        tax_cents=tax,
        total_cents=subtotal + fee + tax,
        has_bulk_items=has_bulk,
        has_normal_items=has_normal,
        tax_rate_bps=TAX_RATE_BPS,
    )


def delivery_fee_explanation(totals: CartTotals, delivery_method: str) -> str:
    """Short user-facing reason for the delivery fee shown at checkout."""
    if delivery_method == DeliveryMethod.PICKUP.value:
        return "Pickup - No delivery fee"

    threshold = cents_to_display(FREE_DELIVERY_THRESHOLD_CENTS)
    fee = totals.delivery_fee_cents

    if fee == 0:
        if totals.has_bulk_items:
            return f"Free delivery for bulk orders over {threshold}"
        return f"Free delivery for orders over {threshold}"
    if fee == BULK_UNDER_THRESHOLD_FEE_CENTS:
        return f"Bulk item delivery fee for orders under {threshold}"
    if fee == NORMAL_UNDER_THRESHOLD_FEE_CENTS:
        if totals.has_bulk_items and totals.subtotal_cents >= FREE_DELIVERY_THRESHOLD_CENTS:
            return "Bulk item delivery fee"
        return f"Standard delivery fee for orders under {threshold}"
    return "Delivery fee"


def resolve_promo_discount(discount_cents: int, discount_type: str | None, totals: CartTotals) -> int:
    """Final discount for a validated promo against these totals.

    free_shipping is worth exactly the delivery fee; other types were already
    computed against the subtotal by the promo validator.
    """
    if discount_type == PromoType.FREE_SHIPPING.value:
        return totals.delivery_fee_cents
    return min(discount_cents, totals.subtotal_cents)
