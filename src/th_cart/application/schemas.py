"""Pydantic schemas for cart quotes (shared with checkout)."""

from pydantic import BaseModel, Field

from src.th_cart.domain.models import CartTotals
from src.th_common.enums import DeliveryMethod
from src.th_common.money import cents_to_display


class CartItemIn(BaseModel):
    listing_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1, le=100)


class CartQuoteRequest(BaseModel):
    items: list[CartItemIn] = Field(..., min_length=1, max_length=50)
    delivery_method: DeliveryMethod = DeliveryMethod.DELIVERY
    promo_code: str | None = Field(None, max_length=64)


class QuoteLineOut(BaseModel):
    listing_id: str
    title: str
    quantity: int
    unit_price_cents: int
    unit_price_display: str
    is_discounted: bool
    is_bulk: bool


class TotalsOut(BaseModel):
    subtotal_cents: int
    subtotal_display: str
    delivery_fee_cents: int
    delivery_fee_display: str
    delivery_fee_explanation: str
    tax_cents: int
    tax_display: str
    tax_rate_bps: int
    discount_cents: int
    discount_display: str
    total_cents: int
    total_display: str
    has_bulk_items: bool
    has_normal_items: bool

    @classmethod
    def build(cls, t: CartTotals, explanation: str, discount_cents: int) -> "TotalsOut":
        total = max(t.total_cents - discount_cents, 0)
        return cls(
            subtotal_cents=t.subtotal_cents,
            subtotal_display=cents_to_display(t.subtotal_cents),
            delivery_fee_cents=t.delivery_fee_cents,
            delivery_fee_display=cents_to_display(t.delivery_fee_cents),
            delivery_fee_explanation=explanation,
            tax_cents=t.tax_cents,
            tax_display=cents_to_display(t.tax_cents),
            tax_rate_bps=t.tax_rate_bps,
            discount_cents=discount_cents,
            discount_display=cents_to_display(discount_cents),
            total_cents=total,
            total_display=cents_to_display(total),
            has_bulk_items=t.has_bulk_items,
            has_normal_items=t.has_normal_items,
        )


class PromoPreviewOut(BaseModel):
    code: str
    valid: bool
    reason: str | None
    message: str


class CartQuoteResponse(BaseModel):
    lines: list[QuoteLineOut]
    totals: TotalsOut
    promo: PromoPreviewOut | None = None
