"""Schedule-driven price decay for listings.

Pure functions: no I/O, no shared state. Every function takes `now` so
callers and tests control the clock; it defaults to the current UTC time.

Day arithmetic uses whole elapsed days, floored:
    days = floor((now - created_at) / 1 day)
A listing created in the future (clock skew) has negative days and stays at
the day-0 tier.
"""

from datetime import datetime, timedelta

from src.th_common.datetime_utils import as_utc, utc_now, whole_days_between
from src.th_common.money import percent_of
from src.th_pricing.domain.models import DisplayPrice, Listing, NextDrop
from src.th_pricing.domain.schedules import DiscountSchedule, get_schedule

ANY_MOMENT_NOW = "Any moment now..."


def days_since_creation(created_at: datetime, now: datetime) -> int:
    return whole_days_between(created_at, now)


def _reserve(listing: Listing) -> int | None:
    # A zero reserve is the same as no reserve.
    return listing.reserve_price_cents or None


def _floor_at_reserve(price_cents: int, reserve: int | None) -> int:
    return max(price_cents, reserve) if reserve is not None else price_cents


def current_percentage(schedule: DiscountSchedule, days: int) -> int:
    """Percentage of the last drop whose day offset is <= days (100 before day 0)."""
    percentage = 100
    for day, pct in schedule.drops:
        if day > days:
            break
        percentage = pct
    return percentage


def current_drop_index(schedule: DiscountSchedule, days: int) -> int:
    if days >= schedule.total_duration_days:
        return len(schedule.drops) - 1
    for i in range(len(schedule.drops) - 1, -1, -1):
        if days >= schedule.drops[i][0]:
            return i
    return 0


def _upcoming_drop(schedule: DiscountSchedule, days: int) -> tuple[int, int] | None:
    """First (day, pct) strictly after `days`, the terminal expiry entry included."""
    if days >= schedule.total_duration_days:
        return None
    for day, pct in schedule.drops:
        if day > days:
            return day, pct
    return None


def _expiry_price(listing: Listing) -> int:
    reserve = _reserve(listing)
    return reserve if reserve is not None else listing.list_price_cents


def compute_effective_price(listing: Listing, now: datetime | None = None) -> int:
    """Current price in cents under the listing's discount schedule.

    Always >= reserve when a reserve is set. Listings without a (known)
    schedule keep their list price.
    """
    schedule = get_schedule(listing.discount_schedule)
    if schedule is None:
        return listing.list_price_cents

    now = now or utc_now()
    reserve = _reserve(listing)
    days = days_since_creation(listing.created_at, now)

    if days >= schedule.total_duration_days:
        return _expiry_price(listing)

    candidate = percent_of(listing.list_price_cents, current_percentage(schedule, days))
    return _floor_at_reserve(candidate, reserve)


def compute_next_drop_price(listing: Listing, now: datetime | None = None) -> int | None:
    """Price at the next scheduled drop, or None when no drop remains."""
    schedule = get_schedule(listing.discount_schedule)
    if schedule is None:
        return None

    now = now or utc_now()
    days = days_since_creation(listing.created_at, now)
    upcoming = _upcoming_drop(schedule, days)
    if upcoming is None:
        return None

    day, pct = upcoming
    if day >= schedule.total_duration_days:
        return _expiry_price(listing)
    return _floor_at_reserve(percent_of(listing.list_price_cents, pct), _reserve(listing))


def format_time_until(remaining: timedelta) -> str:
    """Format a positive duration as 'Xd HHh MMm' (leading zero units dropped)."""
    if remaining <= timedelta(0):
        return ANY_MOMENT_NOW

    total_minutes = int(remaining.total_seconds()) // 60
    days, rem_minutes = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rem_minutes, 60)

    parts: list[str] = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0 or days > 0:
        parts.append(f"{hours:02d}h")
    parts.append(f"{minutes:02d}m")
    return " ".join(parts)


def compute_time_until_next_drop(
    listing: Listing, now: datetime | None = None
) -> tuple[str, datetime] | None:
    """(human label, absolute drop time) for the next drop, or None."""
    schedule = get_schedule(listing.discount_schedule)
    if schedule is None:
        return None

    now = as_utc(now or utc_now())
    days = days_since_creation(listing.created_at, now)
    upcoming = _upcoming_drop(schedule, days)
    if upcoming is None:
        return None

    day, _ = upcoming
    drop_at = as_utc(listing.created_at) + timedelta(days=day)
    return format_time_until(drop_at - now), drop_at


def compute_next_drop(listing: Listing, now: datetime | None = None) -> NextDrop | None:
    """Everything a listing page needs about the upcoming drop."""
    schedule = get_schedule(listing.discount_schedule)
    if schedule is None:
        return None

    now = as_utc(now or utc_now())
    upcoming = _upcoming_drop(schedule, days_since_creation(listing.created_at, now))
    price = compute_next_drop_price(listing, now)
    timing = compute_time_until_next_drop(listing, now)
    if upcoming is None or price is None or timing is None:
        return None

    label, drop_at = timing
    return NextDrop(price_cents=price, percentage=upcoming[1], drop_at=drop_at, time_label=label)


def get_display_price(listing: Listing, now: datetime | None = None) -> DisplayPrice:
    effective = compute_effective_price(listing, now)
    if effective < listing.list_price_cents:
        return DisplayPrice(
            price_cents=effective,
            is_discounted=True,
            original_price_cents=listing.list_price_cents,
        )
    return DisplayPrice(price_cents=effective, is_discounted=False)
