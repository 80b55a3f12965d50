"""Tests for the static discount-schedule registry."""

import pytest

from src.th_pricing.domain.schedules import (
    CLASSIC_60,
    DISCOUNT_SCHEDULES,
    TURBO_30,
    DiscountSchedule,
    get_schedule,
)


class TestRegistry:
    def test_two_schedules(self) -> None:
        assert set(DISCOUNT_SCHEDULES) == {"Turbo-30", "Classic-60"}

    def test_turbo_table(self) -> None:
        assert [d for d, _ in TURBO_30.drops] == [0, 3, 6, 9, 12, 15, 18, 21, 24, 30]
        assert [p for _, p in TURBO_30.drops] == [100, 95, 90, 85, 80, 75, 70, 65, 60, 0]
        assert TURBO_30.total_duration_days == 30

    def test_classic_table(self) -> None:
        assert [d for d, _ in CLASSIC_60.drops] == [0, 7, 14, 21, 28, 35, 42, 49, 56, 60]
        assert [p for _, p in CLASSIC_60.drops] == [100, 90, 80, 75, 70, 65, 60, 55, 50, 0]
        assert CLASSIC_60.expiry_day == 60

    def test_registry_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DISCOUNT_SCHEDULES["Weekly"] = TURBO_30  # type: ignore[index]

    def test_schedule_is_frozen(self) -> None:
        with pytest.raises(AttributeError):
            TURBO_30.total_duration_days = 10  # type: ignore[misc]


class TestGetSchedule:
    def test_known(self) -> None:
        assert get_schedule("Turbo-30") is TURBO_30

    def test_none(self) -> None:
        assert get_schedule(None) is None

    def test_empty(self) -> None:
        assert get_schedule("") is None

    def test_unknown_means_no_discount(self) -> None:
        assert get_schedule("Weekly-7") is None


class TestScheduleInvariants:
    def test_days_must_increase(self) -> None:
        with pytest.raises(ValueError, match="strictly increasing"):
            DiscountSchedule("bad", ((0, 100), (5, 90), (5, 80), (10, 0)), 10)

    def test_percentages_must_not_increase(self) -> None:
        with pytest.raises(ValueError, match="non-increasing"):
            DiscountSchedule("bad", ((0, 100), (5, 80), (7, 90), (10, 0)), 10)

    def test_last_must_be_zero(self) -> None:
        with pytest.raises(ValueError, match="0%"):
            DiscountSchedule("bad", ((0, 100), (5, 80)), 5)

    def test_first_must_be_day_zero(self) -> None:
        with pytest.raises(ValueError, match="day 0"):
            DiscountSchedule("bad", ((1, 100), (5, 0)), 5)

    def test_last_must_match_duration(self) -> None:
        with pytest.raises(ValueError, match="total duration"):
            DiscountSchedule("bad", ((0, 100), (5, 0)), 6)

    def test_empty(self) -> None:
        with pytest.raises(ValueError, match="no drops"):
            DiscountSchedule("bad", (), 0)
