"""Repository Protocol for promo codes."""

from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.th_promo.domain.models import PromoCode


class PromoRepositoryProtocol(Protocol):
    async def get_by_code(self, db: AsyncSession, code: str) -> PromoCode | None: ...

    async def get_by_id(self, db: AsyncSession, promo_id: str) -> PromoCode | None: ...

    async def redeem(
        self, db: AsyncSession, code: str, now: datetime
    ) -> PromoCode | None: ...

    async def list_promos(
        self,
        db: AsyncSession,
        status: str | None,
        search: str | None,
        now: datetime,
        limit: int,
        offset: int,
    ) -> list[PromoCode]: ...

    async def count_promos(
        self,
        db: AsyncSession,
        status: str | None,
        search: str | None,
        now: datetime,
    ) -> int: ...

    async def create(self, db: AsyncSession, promo: PromoCode) -> PromoCode: ...

    async def update(
        self, db: AsyncSession, promo_id: str, fields: dict[str, Any]
    ) -> PromoCode | None: ...

    async def delete(self, db: AsyncSession, promo_id: str) -> bool: ...
