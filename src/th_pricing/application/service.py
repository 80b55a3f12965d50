"""PricingApplicationService — listing price read model and the price-drop batch.

Reads need no transaction. `process_price_drops` commits once at the end and
isolates each listing in a SAVEPOINT so one bad row cannot abort the batch.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.th_common.datetime_utils import utc_now
from src.th_common.errors import ListingNotFoundError
from src.th_common.money import cents_to_display
from src.th_pricing.application.schemas import (
    ListingPricingResponse,
    PriceDropRunResponse,
    ScheduleListResponse,
    ScheduleOut,
    display_or_none,
)
from src.th_pricing.domain.models import PriceDropRunResult
from src.th_pricing.domain.price_calculator import (
    compute_effective_price,
    compute_next_drop,
    days_since_creation,
    get_display_price,
)
from src.th_pricing.domain.repository import ListingRepositoryProtocol
from src.th_pricing.domain.schedules import DISCOUNT_SCHEDULES, get_schedule
from src.th_pricing.infrastructure.persistence import ListingRepository

logger = logging.getLogger(__name__)


class PricingApplicationService:
    def __init__(self, repo: ListingRepositoryProtocol | None = None) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()

    def list_schedules(self) -> ScheduleListResponse:
        return ScheduleListResponse(
            schedules=[ScheduleOut.from_domain(s) for s in DISCOUNT_SCHEDULES.values()]
        )

    async def get_listing_pricing(
        self, db: AsyncSession, listing_id: str, now: datetime | None = None
    ) -> ListingPricingResponse:
        listing = await self._repo.get_listing_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)

        now = now or utc_now()
        display = get_display_price(listing, now)
        schedule = get_schedule(listing.discount_schedule)
        base = dict(
            listing_id=listing.id,
            item_id=listing.item_id,
            schedule=schedule.name if schedule else None,
            list_price_cents=listing.list_price_cents,
            list_price_display=cents_to_display(listing.list_price_cents),
            current_price_cents=display.price_cents,
            current_price_display=cents_to_display(display.price_cents),
            reserve_price_cents=listing.reserve_price_cents,
            is_discounted=display.is_discounted,
        )

        if schedule is None:
            return ListingPricingResponse(
                **base, has_price_drop=False, message="No discount schedule"
            )

        next_drop = compute_next_drop(listing, now)
        if next_drop is None:
            days = days_since_creation(listing.created_at, now)
            message = (
                "Discount period has ended"
                if days >= schedule.total_duration_days
                else "No more price drops available"
            )
            return ListingPricingResponse(**base, has_price_drop=False, message=message)

        if next_drop.price_cents >= display.price_cents:
            message = (
                "At reserve price - no more price drops"
                if listing.reserve_price_cents
                else "No more price drops available"
            )
            return ListingPricingResponse(**base, has_price_drop=False, message=message)

        return ListingPricingResponse(
            **base,
            has_price_drop=True,
            next_drop_price_cents=next_drop.price_cents,
            next_drop_price_display=display_or_none(next_drop.price_cents),
            next_drop_percentage=next_drop.percentage,
            next_drop_at=next_drop.drop_at.isoformat(),
            time_until_next_drop=next_drop.time_label,
        )

    async def process_price_drops(
        self, db: AsyncSession, now: datetime | None = None
    ) -> PriceDropRunResponse:
        now = now or utc_now()
        result = PriceDropRunResult()
        try:
            listings = await self._repo.list_scheduled_active_listings(db)
            logger.info("Processing price drops for %d scheduled listings", len(listings))

            for listing in listings:
                result.processed += 1
                new_price = compute_effective_price(listing, now)
                if new_price >= listing.price_cents:
                    continue
                try:
                    async with db.begin_nested():
                        await self._repo.apply_price_drop(db, listing.id, new_price)
                except SQLAlchemyError:
                    result.errors += 1
                    logger.exception("Price drop failed for listing %s", listing.item_id)
                    continue
                result.dropped += 1
                logger.info(
                    "Price drop for listing %s: %s -> %s",
                    listing.item_id,
                    cents_to_display(listing.price_cents),
                    cents_to_display(new_price),
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Price drop run complete: %d processed, %d dropped, %d errors",
            result.processed, result.dropped, result.errors,
        )
        return PriceDropRunResponse.from_domain(result)
