"""Pydantic schemas for th_pricing API responses.

Money fields come in pairs: `<name>_cents` (int) and `<name>_display` ("$85.00").
"""

from pydantic import BaseModel

from src.th_common.money import cents_to_display
from src.th_pricing.domain.models import PriceDropRunResult
from src.th_pricing.domain.schedules import DiscountSchedule

# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------


class DropOut(BaseModel):
    day: int
    percentage: int


class ScheduleOut(BaseModel):
    name: str
    total_duration_days: int
    drops: list[DropOut]

    @classmethod
    def from_domain(cls, s: DiscountSchedule) -> "ScheduleOut":
        return cls(
            name=s.name,
            total_duration_days=s.total_duration_days,
            drops=[DropOut(day=d, percentage=p) for d, p in s.drops],
        )


class ScheduleListResponse(BaseModel):
    schedules: list[ScheduleOut]


# ---------------------------------------------------------------------------
# Listing pricing
# ---------------------------------------------------------------------------


class ListingPricingResponse(BaseModel):
    listing_id: str
    item_id: str
    schedule: str | None
    list_price_cents: int
    list_price_display: str
    current_price_cents: int
    current_price_display: str
    reserve_price_cents: int | None
    is_discounted: bool
    has_price_drop: bool
    next_drop_price_cents: int | None = None
    next_drop_price_display: str | None = None
    next_drop_percentage: int | None = None
    next_drop_at: str | None = None
    time_until_next_drop: str | None = None
    message: str | None = None


def display_or_none(cents: int | None) -> str | None:
    return cents_to_display(cents) if cents is not None else None


# ---------------------------------------------------------------------------
# Price drop batch
# ---------------------------------------------------------------------------


class PriceDropRunResponse(BaseModel):
    processed: int
    dropped: int
    errors: int

    @classmethod
    def from_domain(cls, r: PriceDropRunResult) -> "PriceDropRunResponse":
        return cls(processed=r.processed, dropped=r.dropped, errors=r.errors)
