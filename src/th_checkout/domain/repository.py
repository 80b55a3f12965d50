"""Repository Protocol for checkout: listing locks/holds and orders."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.th_checkout.domain.models import Order
from src.th_pricing.domain.models import Listing


class CheckoutRepositoryProtocol(Protocol):
    async def lock_listings(
        self, db: AsyncSession, listing_ids: list[str]
    ) -> list[Listing]: ...

    async def hold_listings(
        self, db: AsyncSession, listing_ids: list[str], held_until: datetime
    ) -> int: ...

    async def insert_order(self, db: AsyncSession, order: Order) -> None: ...

    async def get_order(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def release_expired_holds(self, db: AsyncSession, now: datetime) -> int: ...

    async def expire_pending_orders(self, db: AsyncSession, now: datetime) -> int: ...
