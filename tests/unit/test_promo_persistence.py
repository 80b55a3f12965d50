# tests/unit/test_promo_persistence.py
"""Unit tests for PromoRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.th_promo.domain.models import PromoCode
from src.th_promo.infrastructure.persistence import PromoRepository

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


def _make_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "promo_1")
    row.code = kwargs.get("code", "SAVE20")
    row.name = kwargs.get("name", "Summer sale")
    row.description = kwargs.get("description")
    row.type = kwargs.get("type", "percentage")
    row.value = kwargs.get("value", 20)
    row.is_active = kwargs.get("is_active", True)
    row.start_date = kwargs.get("start_date")
    row.end_date = kwargs.get("end_date")
    row.usage_limit = kwargs.get("usage_limit")
    row.usage_count = kwargs.get("usage_count", 0)
    row.created_by = kwargs.get("created_by", "admin_1")
    row.created_at = NOW
    row.updated_at = NOW
    return row


def _result(one: Any = None, many: list | None = None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = one
    result.fetchall.return_value = many or []
    return result


@pytest.fixture
def db():
    return MagicMock()


class TestRedeem:
    @pytest.mark.asyncio
    async def test_returns_updated_promo(self, db):
        db.execute = AsyncMock(return_value=_result(_make_row(usage_count=3)))

        promo = await PromoRepository().redeem(db, "SAVE20", NOW)

        assert promo is not None
        assert promo.usage_count == 3
        assert db.execute.call_args.args[1] == {"code": "SAVE20", "now": NOW}

    @pytest.mark.asyncio
    async def test_single_conditional_update(self, db):
        db.execute = AsyncMock(return_value=_result(None))

        promo = await PromoRepository().redeem(db, "SAVE20", NOW)

        assert promo is None
        assert db.execute.await_count == 1
        sql = str(db.execute.call_args.args[0])
        assert "usage_count = usage_count + 1" in sql
        assert "usage_count < usage_limit" in sql
        assert "RETURNING" in sql


class TestLookup:
    @pytest.mark.asyncio
    async def test_get_by_code(self, db):
        db.execute = AsyncMock(return_value=_result(_make_row()))
        promo = await PromoRepository().get_by_code(db, "SAVE20")
        assert promo is not None and promo.code == "SAVE20"

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        assert await PromoRepository().get_by_id(db, "nope") is None


class TestListAndCount:
    @pytest.mark.asyncio
    async def test_list_passes_filters(self, db):
        db.execute = AsyncMock(return_value=_result(many=[_make_row(), _make_row(id="p2")]))

        promos = await PromoRepository().list_promos(db, "active", "sum", NOW, 20, 40)

        assert len(promos) == 2
        params = db.execute.call_args.args[1]
        assert params["status"] == "active"
        assert params["pattern"] == "%sum%"
        assert params["limit"] == 20
        assert params["offset"] == 40

    @pytest.mark.asyncio
    async def test_no_search_means_null_pattern(self, db):
        db.execute = AsyncMock(return_value=_result(many=[]))
        await PromoRepository().list_promos(db, None, None, NOW, 20, 0)
        assert db.execute.call_args.args[1]["pattern"] is None

    @pytest.mark.asyncio
    async def test_count(self, db):
        result = MagicMock()
        result.scalar_one.return_value = 7
        db.execute = AsyncMock(return_value=result)
        assert await PromoRepository().count_promos(db, None, None, NOW) == 7


class TestWrites:
    @pytest.mark.asyncio
    async def test_create_starts_usage_at_zero(self, db):
        db.execute = AsyncMock(return_value=_result(_make_row()))
        promo = PromoCode(
            id="promo_1", code="SAVE20", name="Summer sale", description=None,
            type="percentage", value=20, is_active=True, start_date=None,
            end_date=None, usage_limit=None, usage_count=99, created_by="admin_1",
            created_at=NOW, updated_at=NOW,
        )

        created = await PromoRepository().create(db, promo)

        assert created.usage_count == 0
        assert "usage_count" not in db.execute.call_args.args[1]

    @pytest.mark.asyncio
    async def test_update_builds_set_clause_from_fields(self, db):
        db.execute = AsyncMock(return_value=_result(_make_row(name="Renamed")))

        promo = await PromoRepository().update(db, "promo_1", {"name": "Renamed"})

        assert promo is not None and promo.name == "Renamed"
        sql = str(db.execute.call_args.args[0])
        assert "name = :name" in sql
        assert db.execute.call_args.args[1] == {"name": "Renamed", "promo_id": "promo_1"}

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_columns(self, db):
        db.execute = AsyncMock()
        with pytest.raises(ValueError, match="Not updatable"):
            await PromoRepository().update(db, "promo_1", {"usage_count": 0})
        db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_update_reads_current_row(self, db):
        db.execute = AsyncMock(return_value=_result(_make_row()))
        promo = await PromoRepository().update(db, "promo_1", {})
        assert promo is not None
        assert "SELECT" in str(db.execute.call_args.args[0])

    @pytest.mark.asyncio
    async def test_delete(self, db):
        db.execute = AsyncMock(return_value=_result(MagicMock()))
        assert await PromoRepository().delete(db, "promo_1") is True

    @pytest.mark.asyncio
    async def test_delete_missing(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        assert await PromoRepository().delete(db, "promo_1") is False
