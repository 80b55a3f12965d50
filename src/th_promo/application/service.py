"""PromoApplicationService — validation, atomic redemption, admin CRUD.

`redeem_or_raise` does not commit; checkout calls it inside its own
transaction. The public `apply_code` and admin writes commit themselves.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.th_common.datetime_utils import utc_now
from src.th_common.enums import PromoRejection
from src.th_common.errors import (
    PromoCodeExistsError,
    PromoCodeNotFoundError,
    PromoCodeRejectedError,
)
from src.th_common.ids import PROMO_PREFIX, new_id
from src.th_promo.application.schemas import (
    ApplyPromoResponse,
    CreatePromoRequest,
    PromoCodeOut,
    PromoListResponse,
    PromoValidationResponse,
    UpdatePromoRequest,
)
from src.th_promo.domain.models import PromoCode, PromoValidation
from src.th_promo.domain.repository import PromoRepositoryProtocol
from src.th_promo.domain.validator import (
    REJECTION_MESSAGES,
    check_definition,
    normalize_code,
    rejection_for,
    validate,
)
from src.th_promo.infrastructure.persistence import PromoRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
_NULLABLE_FIELDS = frozenset({"description", "start_date", "end_date", "usage_limit"})


class PromoApplicationService:
    def __init__(self, repo: PromoRepositoryProtocol | None = None) -> None:
        self._repo: PromoRepositoryProtocol = repo or PromoRepository()

    # -- storefront ---------------------------------------------------------

    async def check_code(
        self,
        db: AsyncSession,
        code: str,
        order_total_cents: int,
        now: datetime | None = None,
    ) -> PromoValidation:
        promo = await self._repo.get_by_code(db, normalize_code(code))
        return validate(promo, order_total_cents, now)

    async def validate_code(
        self,
        db: AsyncSession,
        code: str,
        order_total_cents: int,
        now: datetime | None = None,
    ) -> PromoValidationResponse:
        result = await self.check_code(db, code, order_total_cents, now)
        return PromoValidationResponse.from_domain(result)

    async def redeem_or_raise(
        self, db: AsyncSession, code: str, now: datetime | None = None
    ) -> PromoCode:
        """Atomically count one use of `code`; caller owns the transaction.

        Raises:
            PromoCodeRejectedError: code missing or no longer eligible.
        """
        now = now or utc_now()
        normalized = normalize_code(code)
        promo = await self._repo.redeem(db, normalized, now)
        if promo is not None:
            logger.info("Promo %s redeemed, usage_count=%d", promo.code, promo.usage_count)
            return promo

        current = await self._repo.get_by_code(db, normalized)
        # Eligible again on re-read means we lost a race on the last use
        reason = rejection_for(current, now) or PromoRejection.LIMIT_REACHED
        raise PromoCodeRejectedError(reason.value, REJECTION_MESSAGES[reason])

    async def apply_code(
        self, db: AsyncSession, code: str, now: datetime | None = None
    ) -> ApplyPromoResponse:
        try:
            promo = await self.redeem_or_raise(db, code, now)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ApplyPromoResponse(code=promo.code, usage_count=promo.usage_count)

    # -- admin --------------------------------------------------------------

    async def list_promos(
        self,
        db: AsyncSession,
        status: str | None,
        search: str | None,
        limit: int,
        offset: int,
        now: datetime | None = None,
    ) -> PromoListResponse:
        now = now or utc_now()
        limit = min(limit, MAX_PAGE_SIZE)
        promos = await self._repo.list_promos(db, status, search, now, limit, offset)
        total = await self._repo.count_promos(db, status, search, now)
        return PromoListResponse(
            items=[PromoCodeOut.from_domain(p, now) for p in promos],
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total,
        )

    async def get_promo(self, db: AsyncSession, promo_id: str) -> PromoCodeOut:
        promo = await self._repo.get_by_id(db, promo_id)
        if promo is None:
            raise PromoCodeNotFoundError(promo_id)
        return PromoCodeOut.from_domain(promo)

    async def create_promo(
        self, db: AsyncSession, req: CreatePromoRequest, created_by: str
    ) -> PromoCodeOut:
        check_definition(req.code, req.type.value, req.value, req.start_date, req.end_date)
        now = utc_now()
        try:
            if await self._repo.get_by_code(db, req.code) is not None:
                raise PromoCodeExistsError(req.code)
            promo = await self._repo.create(
                db,
                PromoCode(
                    id=new_id(PROMO_PREFIX),
                    code=req.code,
                    name=req.name,
                    description=req.description,
                    type=req.type.value,
                    value=req.value,
                    is_active=req.is_active,
                    start_date=req.start_date,
                    end_date=req.end_date,
                    usage_limit=req.usage_limit,
                    usage_count=0,
                    created_by=created_by,
                    created_at=now,
                    updated_at=now,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Promo %s created by %s", promo.code, created_by)
        return PromoCodeOut.from_domain(promo)

    async def update_promo(
        self, db: AsyncSession, promo_id: str, req: UpdatePromoRequest
    ) -> PromoCodeOut:
        # Explicit nulls only clear nullable columns
        fields: dict[str, Any] = {
            k: v
            for k, v in req.model_dump(exclude_unset=True).items()
            if v is not None or k in _NULLABLE_FIELDS
        }
        if "type" in fields:
            fields["type"] = fields["type"].value
        try:
            existing = await self._repo.get_by_id(db, promo_id)
            if existing is None:
                raise PromoCodeNotFoundError(promo_id)

            # Validate the promo as it will look after the update
            check_definition(
                fields.get("code", existing.code),
                fields.get("type", existing.type),
                fields.get("value", existing.value),
                fields.get("start_date", existing.start_date),
                fields.get("end_date", existing.end_date),
            )
            new_code = fields.get("code")
            if new_code and new_code != existing.code:
                if await self._repo.get_by_code(db, new_code) is not None:
                    raise PromoCodeExistsError(new_code)

            promo = await self._repo.update(db, promo_id, fields)
            if promo is None:
                raise PromoCodeNotFoundError(promo_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PromoCodeOut.from_domain(promo)

    async def delete_promo(self, db: AsyncSession, promo_id: str) -> None:
        try:
            deleted = await self._repo.delete(db, promo_id)
            if not deleted:
                raise PromoCodeNotFoundError(promo_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Promo %s deleted", promo_id)
