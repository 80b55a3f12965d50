"""Domain models for th_checkout — pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class OrderItem:
    id: str
    order_id: str
    listing_id: str
    unit_price_cents: int
    quantity: int
    is_bulk: bool


@dataclass
class Order:
    """Frozen snapshot of the calculator output at checkout time."""

    id: str
    buyer_id: str
    status: str
    delivery_method: str
    subtotal_cents: int
    delivery_fee_cents: int
    tax_cents: int
    tax_rate_bps: int
    promo_code: str | None
    promo_discount_cents: int
    total_cents: int
    checkout_expires_at: datetime
    created_at: datetime
    updated_at: datetime
    items: list[OrderItem] = field(default_factory=list)


@dataclass
class HoldSweepResult:
    released_listings: int
    expired_orders: int
