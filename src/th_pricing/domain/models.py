"""Domain models for th_pricing — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.th_common.enums import DeliveryCategory


@dataclass
class Listing:
    id: str
    item_id: str
    title: str
    status: str
    list_price_cents: int            # original list price, never decayed
    price_cents: int                 # currently persisted price
    reserve_price_cents: int | None
    discount_schedule: str | None    # schedule name, e.g. "Turbo-30"
    delivery_category: str
    is_held: bool
    held_until: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_bulk(self) -> bool:
        return self.delivery_category == DeliveryCategory.BULK.value


@dataclass
class NextDrop:
    price_cents: int
    percentage: int
    drop_at: datetime
    time_label: str


@dataclass
class PriceDropRunResult:
    processed: int = 0
    dropped: int = 0
    errors: int = 0


@dataclass
class DisplayPrice:
    price_cents: int
    is_discounted: bool
    original_price_cents: int | None = None
