"""CheckoutApplicationService — turns a cart into a held, pending order.

One transaction per checkout:
  1. lock listings FOR UPDATE, reject unavailable or held items
  2. price lines at their effective price, compute cart totals
  3. validate + atomically redeem the promo code (if any)
  4. insert the order snapshot and its items
  5. hold the listings until the checkout expires
Any failure rolls back everything, including the promo redemption.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.th_cart.application.schemas import TotalsOut
from src.th_cart.application.service import ensure_unique_listings, price_cart_lines
from src.th_cart.domain.calculator import (
    compute_totals,
    delivery_fee_explanation,
    resolve_promo_discount,
)
from src.th_checkout.application.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    HoldSweepResponse,
    OrderResponse,
)
from src.th_checkout.domain.models import HoldSweepResult, Order, OrderItem
from src.th_checkout.domain.repository import CheckoutRepositoryProtocol
from src.th_checkout.domain.rules import ensure_purchasable
from src.th_checkout.infrastructure.persistence import CheckoutRepository
from src.th_common.datetime_utils import utc_now
from src.th_common.enums import OrderStatus
from src.th_common.errors import (
    ListingNotFoundError,
    OrderNotFoundError,
    PromoCodeRejectedError,
)
from src.th_common.ids import ORDER_ITEM_PREFIX, ORDER_PREFIX, new_id
from src.th_promo.application.service import PromoApplicationService

logger = logging.getLogger(__name__)


class CheckoutApplicationService:
    def __init__(
        self,
        repo: CheckoutRepositoryProtocol | None = None,
        promo_service: PromoApplicationService | None = None,
        hold_minutes: int | None = None,
    ) -> None:
        self._repo: CheckoutRepositoryProtocol = repo or CheckoutRepository()
        self._promos = promo_service or PromoApplicationService()
        self._hold = timedelta(minutes=hold_minutes or settings.CHECKOUT_HOLD_MINUTES)

    async def checkout(
        self,
        db: AsyncSession,
        buyer_id: str,
        req: CheckoutRequest,
        now: datetime | None = None,
    ) -> CheckoutResponse:
        ensure_unique_listings(req.items)
        now = now or utc_now()
        listing_ids = [item.listing_id for item in req.items]

        try:
            locked = {l.id: l for l in await self._repo.lock_listings(db, listing_ids)}
            for listing_id in listing_ids:
                listing = locked.get(listing_id)
                if listing is None:
                    raise ListingNotFoundError(listing_id)
                ensure_purchasable(listing, now)

            lines, line_out = price_cart_lines(req.items, locked, now)
            method = req.delivery_method.value
            totals = compute_totals(lines, method)

            promo_code: str | None = None
            discount = 0
            if req.promo_code:
                check = await self._promos.check_code(
                    db, req.promo_code, totals.subtotal_cents, now
                )
                if not check.valid:
                    raise PromoCodeRejectedError(check.reason.value, check.message)
                promo = await self._promos.redeem_or_raise(db, req.promo_code, now)
                promo_code = promo.code
                discount = resolve_promo_discount(
                    check.discount_cents, check.discount_type, totals
                )

            summary = TotalsOut.build(totals, delivery_fee_explanation(totals, method), discount)
            expires_at = now + self._hold
            order_id = new_id(ORDER_PREFIX)
            order = Order(
                id=order_id,
                buyer_id=buyer_id,
                status=OrderStatus.PENDING.value,
                delivery_method=method,
                subtotal_cents=totals.subtotal_cents,
                delivery_fee_cents=totals.delivery_fee_cents,
                tax_cents=totals.tax_cents,
                tax_rate_bps=totals.tax_rate_bps,
                promo_code=promo_code,
                promo_discount_cents=discount,
                total_cents=summary.total_cents,
                checkout_expires_at=expires_at,
                created_at=now,
                updated_at=now,
                items=[
                    OrderItem(
                        id=new_id(ORDER_ITEM_PREFIX),
                        order_id=order_id,
                        listing_id=item.listing_id,
                        unit_price_cents=line.unit_price_cents,
                        quantity=line.quantity,
                        is_bulk=line.is_bulk,
                    )
                    for item, line in zip(req.items, lines)
                ],
            )
            await self._repo.insert_order(db, order)
            await self._repo.hold_listings(db, listing_ids, expires_at)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Order %s created for buyer %s: %d items, total=%d cents, promo=%s",
            order.id, buyer_id, len(order.items), order.total_cents, promo_code,
        )
        return CheckoutResponse(
            order_id=order.id,
            status=order.status,
            checkout_url=f"/checkout/{order.id}",
            checkout_expires_at=expires_at.isoformat(),
            promo_code=promo_code,
            lines=line_out,
            totals=summary,
        )

    async def get_order(self, db: AsyncSession, order_id: str, buyer_id: str) -> OrderResponse:
        order = await self._repo.get_order(db, order_id)
        # Other buyers' orders look the same as missing ones
        if order is None or order.buyer_id != buyer_id:
            raise OrderNotFoundError(order_id)
        return OrderResponse.from_domain(order)

    async def release_expired_holds(
        self, db: AsyncSession, now: datetime | None = None
    ) -> HoldSweepResponse:
        now = now or utc_now()
        try:
            released = await self._repo.release_expired_holds(db, now)
            expired = await self._repo.expire_pending_orders(db, now)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Hold sweep: %d listings released, %d orders expired", released, expired)
        return HoldSweepResponse.from_domain(
            HoldSweepResult(released_listings=released, expired_orders=expired)
        )
