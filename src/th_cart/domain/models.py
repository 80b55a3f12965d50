"""Domain models for th_cart — pure dataclasses."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CartLine:
    unit_price_cents: int   # effective price at calculation time
    quantity: int
    is_bulk: bool = False

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


@dataclass(frozen=True)
class CartTotals:
    subtotal_cents: int
    delivery_fee_cents: int
    tax_cents: int
    total_cents: int
    has_bulk_items: bool
    has_normal_items: bool
    tax_rate_bps: int
