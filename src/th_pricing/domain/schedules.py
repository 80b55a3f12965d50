"""Static discount-schedule registry.

A schedule is an ordered table of (day_offset, percent_of_list_price) pairs.
The last pair is always 0% and marks expiry: from that day on the listing
sits at its reserve price (or list price when no reserve is set).

Percentages are always of the ORIGINAL list price, not compounded:
$120 -> $108 -> $96 -> $90, never $120 -> $108 -> $97.20.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class DiscountSchedule:
    name: str
    drops: tuple[tuple[int, int], ...]   # (day_offset, percent), ascending by day
    total_duration_days: int

    def __post_init__(self) -> None:
        if not self.drops:
            raise ValueError(f"{self.name}: schedule has no drops")
        days = [d for d, _ in self.drops]
        pcts = [p for _, p in self.drops]
        if days[0] != 0:
            raise ValueError(f"{self.name}: first drop must be at day 0")
        if any(b <= a for a, b in zip(days, days[1:])):
            raise ValueError(f"{self.name}: day offsets must be strictly increasing")
        if any(b > a for a, b in zip(pcts, pcts[1:])):
            raise ValueError(f"{self.name}: percentages must be non-increasing")
        if pcts[-1] != 0:
            raise ValueError(f"{self.name}: final drop must be 0% (expiry)")
        if days[-1] != self.total_duration_days:
            raise ValueError(f"{self.name}: final drop must land on total duration")

    @property
    def expiry_day(self) -> int:
        return self.drops[-1][0]


TURBO_30 = DiscountSchedule(
    name="Turbo-30",
    drops=(
        (0, 100), (3, 95), (6, 90), (9, 85), (12, 80),
        (15, 75), (18, 70), (21, 65), (24, 60), (30, 0),
    ),
    total_duration_days=30,
)

CLASSIC_60 = DiscountSchedule(
    name="Classic-60",
    drops=(
        (0, 100), (7, 90), (14, 80), (21, 75), (28, 70),
        (35, 65), (42, 60), (49, 55), (56, 50), (60, 0),
    ),
    total_duration_days=60,
)

DISCOUNT_SCHEDULES: Mapping[str, DiscountSchedule] = MappingProxyType({
    TURBO_30.name: TURBO_30,
    CLASSIC_60.name: CLASSIC_60,
})


def get_schedule(name: str | None) -> DiscountSchedule | None:
    """Look up a schedule by name. Unknown or missing names mean 'no discount'."""
    if not name:
        return None
    return DISCOUNT_SCHEDULES.get(name)
