# tests/unit/test_promo_service.py
"""Unit tests for PromoApplicationService using mock repository."""
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.th_common.errors import (
    InvalidPromoCodeError,
    PromoCodeExistsError,
    PromoCodeNotFoundError,
    PromoCodeRejectedError,
)
from src.th_promo.application.schemas import CreatePromoRequest, UpdatePromoRequest
from src.th_promo.application.service import MAX_PAGE_SIZE, PromoApplicationService
from src.th_promo.domain.models import PromoCode

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


def _make_promo(**kwargs) -> PromoCode:
    defaults = dict(
        id="promo_1", code="SAVE20", name="Summer sale", description=None,
        type="percentage", value=20, is_active=True,
        start_date=None, end_date=None, usage_limit=10, usage_count=2,
        created_by="admin_1", created_at=NOW, updated_at=NOW,
    )
    defaults.update(kwargs)
    return PromoCode(**defaults)


@pytest.fixture
def db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def mock_repo():
    return MagicMock()


class TestValidateCode:
    @pytest.mark.asyncio
    async def test_looks_up_normalized_code(self, db, mock_repo):
        mock_repo.get_by_code = AsyncMock(return_value=_make_promo())
        svc = PromoApplicationService(repo=mock_repo)

        resp = await svc.validate_code(db, " save20 ", 10000, NOW)

        mock_repo.get_by_code.assert_awaited_once_with(db, "SAVE20")
        assert resp.valid is True
        assert resp.discount is not None
        assert resp.discount.amount_cents == 2000
        assert resp.discount.description == "20% off"

    @pytest.mark.asyncio
    async def test_unknown_code(self, db, mock_repo):
        mock_repo.get_by_code = AsyncMock(return_value=None)
        resp = await PromoApplicationService(repo=mock_repo).validate_code(db, "NOPE", 100, NOW)
        assert resp.valid is False
        assert resp.reason == "NOT_FOUND"
        assert resp.message == "Invalid promo code"
        assert resp.discount is None

    @pytest.mark.asyncio
    async def test_validation_has_no_side_effects(self, db, mock_repo):
        mock_repo.get_by_code = AsyncMock(return_value=_make_promo())
        mock_repo.redeem = AsyncMock()
        await PromoApplicationService(repo=mock_repo).validate_code(db, "SAVE20", 100, NOW)
        mock_repo.redeem.assert_not_awaited()
        db.commit.assert_not_awaited()


class TestRedeem:
    @pytest.mark.asyncio
    async def test_success_does_not_commit(self, db, mock_repo):
        mock_repo.redeem = AsyncMock(return_value=_make_promo(usage_count=3))
        svc = PromoApplicationService(repo=mock_repo)

        promo = await svc.redeem_or_raise(db, "save20", NOW)

        assert promo.usage_count == 3
        mock_repo.redeem.assert_awaited_once_with(db, "SAVE20", NOW)
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_reports_reason(self, db, mock_repo):
        mock_repo.redeem = AsyncMock(return_value=None)
        mock_repo.get_by_code = AsyncMock(
            return_value=_make_promo(end_date=NOW - timedelta(days=1))
        )
        svc = PromoApplicationService(repo=mock_repo)

        with pytest.raises(PromoCodeRejectedError) as exc_info:
            await svc.redeem_or_raise(db, "SAVE20", NOW)
        assert exc_info.value.reason == "EXPIRED"
        assert exc_info.value.message == "This promo code has expired"

    @pytest.mark.asyncio
    async def test_missing_code(self, db, mock_repo):
        mock_repo.redeem = AsyncMock(return_value=None)
        mock_repo.get_by_code = AsyncMock(return_value=None)

        with pytest.raises(PromoCodeRejectedError) as exc_info:
            await PromoApplicationService(repo=mock_repo).redeem_or_raise(db, "X", NOW)
        assert exc_info.value.reason == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_lost_race_reports_limit_reached(self, db, mock_repo):
        # Conditional update matched nothing but the re-read still looks eligible
        mock_repo.redeem = AsyncMock(return_value=None)
        mock_repo.get_by_code = AsyncMock(return_value=_make_promo(usage_count=9))

        with pytest.raises(PromoCodeRejectedError) as exc_info:
            await PromoApplicationService(repo=mock_repo).redeem_or_raise(db, "SAVE20", NOW)
        assert exc_info.value.reason == "LIMIT_REACHED"


class TestApplyCode:
    @pytest.mark.asyncio
    async def test_commits_on_success(self, db, mock_repo):
        mock_repo.redeem = AsyncMock(return_value=_make_promo(usage_count=3))

        resp = await PromoApplicationService(repo=mock_repo).apply_code(db, "SAVE20", NOW)

        assert resp.code == "SAVE20"
        assert resp.usage_count == 3
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rolls_back_on_rejection(self, db, mock_repo):
        mock_repo.redeem = AsyncMock(return_value=None)
        mock_repo.get_by_code = AsyncMock(return_value=_make_promo(is_active=False))

        with pytest.raises(PromoCodeRejectedError):
            await PromoApplicationService(repo=mock_repo).apply_code(db, "SAVE20", NOW)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestListPromos:
    @pytest.mark.asyncio
    async def test_caps_limit_and_reports_has_more(self, db, mock_repo):
        mock_repo.list_promos = AsyncMock(return_value=[_make_promo()])
        mock_repo.count_promos = AsyncMock(return_value=250)
        svc = PromoApplicationService(repo=mock_repo)

        resp = await svc.list_promos(db, "active", None, 500, 0, NOW)

        assert resp.limit == MAX_PAGE_SIZE
        assert resp.total == 250
        assert resp.has_more is True
        assert resp.items[0].calculated_status == "active"
        assert mock_repo.list_promos.call_args.args[4] == MAX_PAGE_SIZE


class TestCreatePromo:
    def _req(self, **kwargs) -> CreatePromoRequest:
        data = dict(code="SAVE20", name="Summer sale", type="percentage", value=20)
        data.update(kwargs)
        return CreatePromoRequest(**data)

    @pytest.mark.asyncio
    async def test_creates_and_commits(self, db, mock_repo):
        mock_repo.get_by_code = AsyncMock(return_value=None)
        mock_repo.create = AsyncMock(side_effect=lambda _db, p: p)
        svc = PromoApplicationService(repo=mock_repo)

        out = await svc.create_promo(db, self._req(), created_by="admin_1")

        assert out.code == "SAVE20"
        assert out.usage_count == 0
        assert out.created_by == "admin_1"
        assert out.id.startswith("promo_")
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_code(self, db, mock_repo):
        mock_repo.get_by_code = AsyncMock(return_value=_make_promo())
        mock_repo.create = AsyncMock()

        with pytest.raises(PromoCodeExistsError):
            await PromoApplicationService(repo=mock_repo).create_promo(db, self._req(), "a")
        mock_repo.create.assert_not_awaited()
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_definition_never_hits_db(self, db, mock_repo):
        mock_repo.get_by_code = AsyncMock()

        with pytest.raises(InvalidPromoCodeError):
            await PromoApplicationService(repo=mock_repo).create_promo(
                db, self._req(value=150), "a"
            )
        mock_repo.get_by_code.assert_not_awaited()


class TestUpdatePromo:
    @pytest.mark.asyncio
    async def test_partial_update_passes_only_set_fields(self, db, mock_repo):
        mock_repo.get_by_id = AsyncMock(return_value=_make_promo())
        mock_repo.update = AsyncMock(return_value=_make_promo(name="Renamed"))
        svc = PromoApplicationService(repo=mock_repo)

        out = await svc.update_promo(db, "promo_1", UpdatePromoRequest(name="Renamed"))

        assert out.name == "Renamed"
        assert mock_repo.update.call_args.args[2] == {"name": "Renamed"}
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_explicit_null_clears_nullable_field(self, db, mock_repo):
        mock_repo.get_by_id = AsyncMock(return_value=_make_promo())
        mock_repo.update = AsyncMock(return_value=_make_promo(usage_limit=None))

        await PromoApplicationService(repo=mock_repo).update_promo(
            db, "promo_1", UpdatePromoRequest(usage_limit=None, name=None)
        )

        assert mock_repo.update.call_args.args[2] == {"usage_limit": None}

    @pytest.mark.asyncio
    async def test_validates_merged_definition(self, db, mock_repo):
        # existing is percentage; raising value past 100 must be refused
        mock_repo.get_by_id = AsyncMock(return_value=_make_promo())
        mock_repo.update = AsyncMock()

        with pytest.raises(InvalidPromoCodeError):
            await PromoApplicationService(repo=mock_repo).update_promo(
                db, "promo_1", UpdatePromoRequest(value=120)
            )
        mock_repo.update.assert_not_awaited()
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rename_to_existing_code(self, db, mock_repo):
        mock_repo.get_by_id = AsyncMock(return_value=_make_promo())
        mock_repo.get_by_code = AsyncMock(return_value=_make_promo(id="promo_2", code="TAKEN"))

        with pytest.raises(PromoCodeExistsError):
            await PromoApplicationService(repo=mock_repo).update_promo(
                db, "promo_1", UpdatePromoRequest(code="TAKEN")
            )

    @pytest.mark.asyncio
    async def test_missing(self, db, mock_repo):
        mock_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(PromoCodeNotFoundError):
            await PromoApplicationService(repo=mock_repo).update_promo(
                db, "nope", UpdatePromoRequest(name="x")
            )


class TestGetAndDelete:
    @pytest.mark.asyncio
    async def test_get_missing(self, db, mock_repo):
        mock_repo.get_by_id = AsyncMock(return_value=None)
        with pytest.raises(PromoCodeNotFoundError):
            await PromoApplicationService(repo=mock_repo).get_promo(db, "nope")

    @pytest.mark.asyncio
    async def test_delete_commits(self, db, mock_repo):
        mock_repo.delete = AsyncMock(return_value=True)
        await PromoApplicationService(repo=mock_repo).delete_promo(db, "promo_1")
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_missing(self, db, mock_repo):
        mock_repo.delete = AsyncMock(return_value=False)
        with pytest.raises(PromoCodeNotFoundError):
            await PromoApplicationService(repo=mock_repo).delete_promo(db, "nope")
        db.rollback.assert_awaited_once()
