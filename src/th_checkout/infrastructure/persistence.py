"""CheckoutRepository — concrete implementation of CheckoutRepositoryProtocol.

All queries use raw text() SQL (no ORM).
Listings are locked with SELECT ... FOR UPDATE in id order so two checkouts
sharing items always lock in the same sequence.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.th_checkout.domain.models import Order, OrderItem
from src.th_pricing.domain.models import Listing
from src.th_pricing.infrastructure.persistence import LISTING_COLUMNS, row_to_listing

# ---------------------------------------------------------------------------
# SQL: listings
# ---------------------------------------------------------------------------

_LOCK_LISTINGS_SQL = text(f"""
    SELECT {LISTING_COLUMNS}
    FROM listings
    WHERE id = ANY(CAST(:listing_ids AS TEXT[]))
    ORDER BY id
    FOR UPDATE
""")

_HOLD_LISTINGS_SQL = text("""
    UPDATE listings
    SET is_held = TRUE,
        held_until = :held_until,
        status = 'processing',
        updated_at = NOW()
    WHERE id = ANY(CAST(:listing_ids AS TEXT[]))
""")

_RELEASE_EXPIRED_HOLDS_SQL = text("""
    UPDATE listings
    SET is_held = FALSE,
        held_until = NULL,
        status = CASE WHEN status = 'processing' THEN 'active' ELSE status END,
        updated_at = NOW()
    WHERE held_until < CAST(:now AS TIMESTAMPTZ)
      AND (is_held OR status = 'processing')
""")

# ---------------------------------------------------------------------------
# SQL: orders
# ---------------------------------------------------------------------------

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders
        (id, buyer_id, status, delivery_method,
         subtotal_cents, delivery_fee_cents, tax_cents, tax_rate_bps,
         promo_code, promo_discount_cents, total_cents,
         checkout_expires_at, created_at, updated_at)
    VALUES
        (:id, :buyer_id, :status, :delivery_method,
         :subtotal_cents, :delivery_fee_cents, :tax_cents, :tax_rate_bps,
         :promo_code, :promo_discount_cents, :total_cents,
         :checkout_expires_at, :created_at, :updated_at)
""")

_INSERT_ORDER_ITEM_SQL = text("""
    INSERT INTO order_items
        (id, order_id, listing_id, unit_price_cents, quantity, is_bulk)
    VALUES
        (:id, :order_id, :listing_id, :unit_price_cents, :quantity, :is_bulk)
""")

_GET_ORDER_SQL = text("""
    SELECT id, buyer_id, status, delivery_method,
           subtotal_cents, delivery_fee_cents, tax_cents, tax_rate_bps,
           promo_code, promo_discount_cents, total_cents,
           checkout_expires_at, created_at, updated_at
    FROM orders
    WHERE id = :order_id
""")

_GET_ORDER_ITEMS_SQL = text("""
    SELECT id, order_id, listing_id, unit_price_cents, quantity, is_bulk
    FROM order_items
    WHERE order_id = :order_id
    ORDER BY id
""")

_EXPIRE_PENDING_ORDERS_SQL = text("""
    UPDATE orders
    SET status = 'EXPIRED',
        updated_at = NOW()
    WHERE status = 'PENDING'
      AND checkout_expires_at < CAST(:now AS TIMESTAMPTZ)
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_order(row: object) -> Order:
    return Order(
        id=row.id,  # type: ignore[attr-defined]
        buyer_id=row.buyer_id,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        delivery_method=row.delivery_method,  # type: ignore[attr-defined]
        subtotal_cents=row.subtotal_cents,  # type: ignore[attr-defined]
        delivery_fee_cents=row.delivery_fee_cents,  # type: ignore[attr-defined]
        tax_cents=row.tax_cents,  # type: ignore[attr-defined]
        tax_rate_bps=row.tax_rate_bps,  # type: ignore[attr-defined]
        promo_code=row.promo_code,  # type: ignore[attr-defined]
        promo_discount_cents=row.promo_discount_cents,  # type: ignore[attr-defined]
        total_cents=row.total_cents,  # type: ignore[attr-defined]
        checkout_expires_at=row.checkout_expires_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_item(row: object) -> OrderItem:
    return OrderItem(
        id=row.id,  # type: ignore[attr-defined]
        order_id=row.order_id,  # type: ignore[attr-defined]
        listing_id=row.listing_id,  # type: ignore[attr-defined]
        unit_price_cents=row.unit_price_cents,  # type: ignore[attr-defined]
        quantity=row.quantity,  # type: ignore[attr-defined]
        is_bulk=row.is_bulk,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class CheckoutRepository:
    async def lock_listings(
        self, db: AsyncSession, listing_ids: list[str]
    ) -> list[Listing]:
        result = await db.execute(_LOCK_LISTINGS_SQL, {"listing_ids": listing_ids})
        return [row_to_listing(row) for row in result.fetchall()]

    async def hold_listings(
        self, db: AsyncSession, listing_ids: list[str], held_until: datetime
    ) -> int:
        result = await db.execute(
            _HOLD_LISTINGS_SQL,
            {"listing_ids": listing_ids, "held_until": held_until},
        )
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def insert_order(self, db: AsyncSession, order: Order) -> None:
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "buyer_id": order.buyer_id,
                "status": order.status,
                "delivery_method": order.delivery_method,
                "subtotal_cents": order.subtotal_cents,
                "delivery_fee_cents": order.delivery_fee_cents,
                "tax_cents": order.tax_cents,
                "tax_rate_bps": order.tax_rate_bps,
                "promo_code": order.promo_code,
                "promo_discount_cents": order.promo_discount_cents,
                "total_cents": order.total_cents,
                "checkout_expires_at": order.checkout_expires_at,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
            },
        )
        for item in order.items:
            await db.execute(
                _INSERT_ORDER_ITEM_SQL,
                {
                    "id": item.id,
                    "order_id": order.id,
                    "listing_id": item.listing_id,
                    "unit_price_cents": item.unit_price_cents,
                    "quantity": item.quantity,
                    "is_bulk": item.is_bulk,
                },
            )

    async def get_order(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_SQL, {"order_id": order_id})
        row = result.fetchone()
        if row is None:
            return None
        order = _row_to_order(row)
        items_result = await db.execute(_GET_ORDER_ITEMS_SQL, {"order_id": order_id})
        order.items = [_row_to_item(r) for r in items_result.fetchall()]
        return order

    async def release_expired_holds(self, db: AsyncSession, now: datetime) -> int:
        result = await db.execute(_RELEASE_EXPIRED_HOLDS_SQL, {"now": now})
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def expire_pending_orders(self, db: AsyncSession, now: datetime) -> int:
        result = await db.execute(_EXPIRE_PENDING_ORDERS_SQL, {"now": now})
        return int(result.rowcount)  # type: ignore[attr-defined]
