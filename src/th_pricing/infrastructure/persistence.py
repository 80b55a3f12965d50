"""ListingRepository — concrete implementation of ListingRepositoryProtocol.

All queries use raw text() SQL (no ORM).
Transaction ownership: the CALLER (application service) opens and commits.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.th_pricing.domain.models import Listing

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

LISTING_COLUMNS = """
    id, item_id, title, status,
    list_price_cents, price_cents, reserve_price_cents,
    discount_schedule, delivery_category,
    is_held, held_until, created_at, updated_at
"""

_GET_LISTING_SQL = text(f"""
    SELECT {LISTING_COLUMNS}
    FROM listings
    WHERE id = :listing_id
""")

_LIST_SCHEDULED_ACTIVE_SQL = text(f"""
    SELECT {LISTING_COLUMNS}
    FROM listings
    WHERE status = 'active'
      AND discount_schedule IS NOT NULL
    ORDER BY created_at, id
""")

_UPDATE_PRICE_SQL = text("""
    UPDATE listings
    SET price_cents = :price_cents,
        updated_at = NOW()
    WHERE id = :listing_id
""")

_INSERT_PRICE_HISTORY_SQL = text("""
    INSERT INTO price_history (listing_id, price_cents)
    VALUES (:listing_id, :price_cents)
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def row_to_listing(row: object) -> Listing:
    return Listing(
        id=row.id,  # type: ignore[attr-defined]
        item_id=row.item_id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        list_price_cents=row.list_price_cents,  # type: ignore[attr-defined]
        price_cents=row.price_cents,  # type: ignore[attr-defined]
        reserve_price_cents=row.reserve_price_cents,  # type: ignore[attr-defined]
        discount_schedule=row.discount_schedule,  # type: ignore[attr-defined]
        delivery_category=row.delivery_category,  # type: ignore[attr-defined]
        is_held=row.is_held,  # type: ignore[attr-defined]
        held_until=row.held_until,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class ListingRepository:
    async def get_listing_by_id(
        self, db: AsyncSession, listing_id: str
    ) -> Listing | None:
        result = await db.execute(_GET_LISTING_SQL, {"listing_id": listing_id})
        row = result.fetchone()
        return row_to_listing(row) if row else None

    async def list_scheduled_active_listings(self, db: AsyncSession) -> list[Listing]:
        result = await db.execute(_LIST_SCHEDULED_ACTIVE_SQL)
        return [row_to_listing(row) for row in result.fetchall()]

    async def apply_price_drop(
        self, db: AsyncSession, listing_id: str, new_price_cents: int
    ) -> None:
        params = {"listing_id": listing_id, "price_cents": new_price_cents}
        await db.execute(_UPDATE_PRICE_SQL, params)
        await db.execute(_INSERT_PRICE_HISTORY_SQL, params)
