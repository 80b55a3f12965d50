"""Pydantic schemas for checkout and orders."""

from pydantic import BaseModel, Field

from src.th_cart.application.schemas import CartItemIn, QuoteLineOut, TotalsOut
from src.th_checkout.domain.models import HoldSweepResult, Order
from src.th_common.enums import DeliveryMethod
from src.th_common.money import cents_to_display


class CheckoutRequest(BaseModel):
    items: list[CartItemIn] = Field(..., min_length=1, max_length=50)
    delivery_method: DeliveryMethod = DeliveryMethod.DELIVERY
    promo_code: str | None = Field(None, max_length=64)


class CheckoutResponse(BaseModel):
    order_id: str
    status: str
    checkout_url: str
    checkout_expires_at: str
    promo_code: str | None
    lines: list[QuoteLineOut]
    totals: TotalsOut


class OrderItemOut(BaseModel):
    listing_id: str
    unit_price_cents: int
    quantity: int
    is_bulk: bool


class OrderResponse(BaseModel):
    id: str
    status: str
    delivery_method: str
    subtotal_cents: int
    delivery_fee_cents: int
    tax_cents: int
    tax_rate_bps: int
    promo_code: str | None
    promo_discount_cents: int
    total_cents: int
    total_display: str
    checkout_expires_at: str
    created_at: str
    items: list[OrderItemOut]

    @classmethod
    def from_domain(cls, o: Order) -> "OrderResponse":
        return cls(
            id=o.id,
            status=o.status,
            delivery_method=o.delivery_method,
            subtotal_cents=o.subtotal_cents,
            delivery_fee_cents=o.delivery_fee_cents,
            tax_cents=o.tax_cents,
            tax_rate_bps=o.tax_rate_bps,
            promo_code=o.promo_code,
            promo_discount_cents=o.promo_discount_cents,
            total_cents=o.total_cents,
            total_display=cents_to_display(o.total_cents),
            checkout_expires_at=o.checkout_expires_at.isoformat(),
            created_at=o.created_at.isoformat(),
            items=[
                OrderItemOut(
                    listing_id=i.listing_id,
                    unit_price_cents=i.unit_price_cents,
                    quantity=i.quantity,
                    is_bulk=i.is_bulk,
                )
                for i in o.items
            ],
        )


class HoldSweepResponse(BaseModel):
    released_listings: int
    expired_orders: int

    @classmethod
    def from_domain(cls, r: HoldSweepResult) -> "HoldSweepResponse":
        return cls(released_listings=r.released_listings, expired_orders=r.expired_orders)
