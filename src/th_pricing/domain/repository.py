"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.th_pricing.domain.models import Listing


class ListingRepositoryProtocol(Protocol):
    async def get_listing_by_id(
        self,
        db: AsyncSession,
        listing_id: str,
    ) -> Listing | None: ...

    async def list_scheduled_active_listings(
        self,
        db: AsyncSession,
    ) -> list[Listing]: ...

    async def apply_price_drop(
        self,
        db: AsyncSession,
        listing_id: str,
        new_price_cents: int,
    ) -> None: ...
