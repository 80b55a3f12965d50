"""Tests for promo code eligibility, discount amounts and admin rules."""

from datetime import UTC, datetime, timedelta

import pytest

from src.th_common.enums import PromoRejection, PromoStatus
from src.th_common.errors import InvalidPromoCodeError
from src.th_promo.domain.models import PromoCode
from src.th_promo.domain.validator import (
    REJECTION_MESSAGES,
    calculated_status,
    check_definition,
    describe,
    normalize_code,
    rejection_for,
    validate,
)

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


def _promo(**kwargs) -> PromoCode:
    defaults = dict(
        id="promo_1", code="SAVE20", name="Summer sale", description=None,
        type="percentage", value=20, is_active=True,
        start_date=None, end_date=None, usage_limit=None, usage_count=0,
        created_by="admin_1", created_at=NOW, updated_at=NOW,
    )
    defaults.update(kwargs)
    return PromoCode(**defaults)


class TestDiscountAmounts:
    def test_percentage(self) -> None:
        result = validate(_promo(), 10000, NOW)
        assert result.valid is True
        assert result.discount_cents == 2000
        assert result.discount_type == "percentage"
        assert result.description == "20% off"

    def test_percentage_rounds_half_up(self) -> None:
        # 15% of 3333 = 499.95
        assert validate(_promo(value=15), 3333, NOW).discount_cents == 500

    def test_fixed_amount_capped_at_order_total(self) -> None:
        result = validate(_promo(type="fixed_amount", value=5000), 3000, NOW)
        assert result.discount_cents == 3000

    def test_fixed_amount_under_total(self) -> None:
        result = validate(_promo(type="fixed_amount", value=500), 3000, NOW)
        assert result.discount_cents == 500
        assert result.description == "$5.00 off"

    def test_free_shipping_is_placeholder(self) -> None:
        result = validate(_promo(type="free_shipping", value=0), 3000, NOW)
        assert result.valid is True
        assert result.discount_cents == 0
        assert result.discount_type == "free_shipping"
        assert describe(result.promo) == "Free shipping"  # type: ignore[arg-type]


class TestRejections:
    def test_not_found(self) -> None:
        result = validate(None, 10000, NOW)
        assert result.valid is False
        assert result.reason is PromoRejection.NOT_FOUND
        assert result.message == "Invalid promo code"

    def test_not_found_carries_no_promo_or_discount(self) -> None:
        result = validate(None, 0, NOW)
        assert result.valid is False
        assert result.promo is None
        assert result.discount_cents == 0
        assert result.discount_type is None

    def test_inactive(self) -> None:
        assert validate(_promo(is_active=False), 1, NOW).reason is PromoRejection.INACTIVE

    def test_not_started(self) -> None:
        promo = _promo(start_date=NOW + timedelta(seconds=1))
        assert validate(promo, 1, NOW).reason is PromoRejection.NOT_STARTED

    def test_start_boundary_is_inclusive(self) -> None:
        assert validate(_promo(start_date=NOW), 1, NOW).valid is True

    def test_expired(self) -> None:
        promo = _promo(end_date=NOW - timedelta(seconds=1))
        assert validate(promo, 1, NOW).reason is PromoRejection.EXPIRED

    def test_end_boundary_is_inclusive(self) -> None:
        assert validate(_promo(end_date=NOW), 1, NOW).valid is True

    def test_limit_reached(self) -> None:
        promo = _promo(usage_limit=5, usage_count=5)
        assert validate(promo, 1, NOW).reason is PromoRejection.LIMIT_REACHED

    def test_under_limit(self) -> None:
        assert validate(_promo(usage_limit=5, usage_count=4), 1, NOW).valid is True

    def test_zero_limit_is_set(self) -> None:
        promo = _promo(usage_limit=0, usage_count=0)
        assert validate(promo, 1, NOW).reason is PromoRejection.LIMIT_REACHED

    def test_first_failure_wins(self) -> None:
        promo = _promo(
            is_active=False,
            end_date=NOW - timedelta(days=1),
            usage_limit=1,
            usage_count=1,
        )
        assert rejection_for(promo, NOW) is PromoRejection.INACTIVE

    def test_expired_before_limit(self) -> None:
        promo = _promo(end_date=NOW - timedelta(days=1), usage_limit=1, usage_count=1)
        assert rejection_for(promo, NOW) is PromoRejection.EXPIRED

    def test_messages_cover_every_reason(self) -> None:
        assert set(REJECTION_MESSAGES) == set(PromoRejection)

    def test_rejection_is_returned_not_raised(self) -> None:
        result = validate(_promo(is_active=False), 1, NOW)
        assert result.discount_cents == 0
        assert result.promo is None


class TestNormalizeCode:
    def test_uppercases_and_strips(self) -> None:
        assert normalize_code("  save20 ") == "SAVE20"


class TestCalculatedStatus:
    def test_active(self) -> None:
        assert calculated_status(_promo(), NOW) is PromoStatus.ACTIVE

    def test_inactive_wins(self) -> None:
        promo = _promo(is_active=False, end_date=NOW - timedelta(days=1))
        assert calculated_status(promo, NOW) is PromoStatus.INACTIVE

    def test_expired(self) -> None:
        promo = _promo(end_date=NOW - timedelta(days=1))
        assert calculated_status(promo, NOW) is PromoStatus.EXPIRED

    def test_scheduled(self) -> None:
        promo = _promo(start_date=NOW + timedelta(days=1))
        assert calculated_status(promo, NOW) is PromoStatus.SCHEDULED

    def test_limit_reached(self) -> None:
        promo = _promo(usage_limit=3, usage_count=3)
        assert calculated_status(promo, NOW) is PromoStatus.LIMIT_REACHED


class TestCheckDefinition:
    def test_valid(self) -> None:
        check_definition("SAVE20", "percentage", 20, NOW, NOW + timedelta(days=7))

    @pytest.mark.parametrize("code", ["save20", "SAVE-20", "SAVE 20", ""])
    def test_bad_code_format(self, code: str) -> None:
        with pytest.raises(InvalidPromoCodeError, match="uppercase alphanumeric"):
            check_definition(code, "percentage", 20, None, None)

    def test_bad_type(self) -> None:
        with pytest.raises(InvalidPromoCodeError, match="Invalid type"):
            check_definition("X1", "bogo", 20, None, None)

    def test_percentage_over_100(self) -> None:
        with pytest.raises(InvalidPromoCodeError, match="between 0 and 100"):
            check_definition("X1", "percentage", 101, None, None)

    def test_negative_fixed_amount(self) -> None:
        with pytest.raises(InvalidPromoCodeError, match="positive"):
            check_definition("X1", "fixed_amount", -1, None, None)

    def test_start_after_end(self) -> None:
        with pytest.raises(InvalidPromoCodeError, match="before end"):
            check_definition("X1", "free_shipping", 0, NOW, NOW)

    def test_error_is_400(self) -> None:
        with pytest.raises(InvalidPromoCodeError) as exc_info:
            check_definition("bad", "percentage", 1, None, None)
        assert exc_info.value.http_status == 400
