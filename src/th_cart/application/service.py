"""CartApplicationService — read-only cart quote.

Prices every line at its current effective price, runs the cart calculator,
and previews (never redeems) an optional promo code.
"""

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.th_cart.application.schemas import (
    CartItemIn,
    CartQuoteRequest,
    CartQuoteResponse,
    PromoPreviewOut,
    QuoteLineOut,
    TotalsOut,
)
from src.th_cart.domain.calculator import (
    compute_totals,
    delivery_fee_explanation,
    resolve_promo_discount,
)
from src.th_cart.domain.models import CartLine
from src.th_common.datetime_utils import utc_now
from src.th_common.errors import DuplicateCartLineError, ListingNotFoundError
from src.th_common.money import cents_to_display
from src.th_pricing.domain.models import Listing
from src.th_pricing.domain.price_calculator import compute_effective_price
from src.th_pricing.domain.repository import ListingRepositoryProtocol
from src.th_pricing.infrastructure.persistence import ListingRepository
from src.th_promo.application.service import PromoApplicationService
from src.th_promo.domain.validator import normalize_code


def ensure_unique_listings(items: Sequence[CartItemIn]) -> None:
    seen: set[str] = set()
    for item in items:
        if item.listing_id in seen:
            raise DuplicateCartLineError(item.listing_id)
        seen.add(item.listing_id)


def price_cart_lines(
    items: Sequence[CartItemIn],
    listings: dict[str, Listing],
    now: datetime,
) -> tuple[list[CartLine], list[QuoteLineOut]]:
    """Effective-price each requested item. Every listing_id must be in `listings`."""
    lines: list[CartLine] = []
    out: list[QuoteLineOut] = []
    for item in items:
        listing = listings.get(item.listing_id)
        if listing is None:
            raise ListingNotFoundError(item.listing_id)
        unit_price = compute_effective_price(listing, now)
        lines.append(
            CartLine(
                unit_price_cents=unit_price,
                quantity=item.quantity,
                is_bulk=listing.is_bulk,
            )
        )
        out.append(
            QuoteLineOut(
                listing_id=listing.id,
                title=listing.title,
                quantity=item.quantity,
                unit_price_cents=unit_price,
                unit_price_display=cents_to_display(unit_price),
                is_discounted=unit_price < listing.list_price_cents,
                is_bulk=listing.is_bulk,
            )
        )
    return lines, out


class CartApplicationService:
    def __init__(
        self,
        listing_repo: ListingRepositoryProtocol | None = None,
        promo_service: PromoApplicationService | None = None,
    ) -> None:
        self._listings: ListingRepositoryProtocol = listing_repo or ListingRepository()
        self._promos = promo_service or PromoApplicationService()

    async def quote(
        self, db: AsyncSession, req: CartQuoteRequest, now: datetime | None = None
    ) -> CartQuoteResponse:
        now = now or utc_now()
        ensure_unique_listings(req.items)

        listings: dict[str, Listing] = {}
        for item in req.items:
            listing = await self._listings.get_listing_by_id(db, item.listing_id)
            if listing is None:
                raise ListingNotFoundError(item.listing_id)
            listings[listing.id] = listing

        lines, line_out = price_cart_lines(req.items, listings, now)
        method = req.delivery_method.value
        totals = compute_totals(lines, method)

        discount = 0
        preview: PromoPreviewOut | None = None
        if req.promo_code:
            result = await self._promos.check_code(db, req.promo_code, totals.subtotal_cents, now)
            if result.valid:
                discount = resolve_promo_discount(
                    result.discount_cents, result.discount_type, totals
                )
            preview = PromoPreviewOut(
                code=normalize_code(req.promo_code),
                valid=result.valid,
                reason=result.reason.value if result.reason else None,
                message=result.message,
            )

        return CartQuoteResponse(
            lines=line_out,
            totals=TotalsOut.build(totals, delivery_fee_explanation(totals, method), discount),
            promo=preview,
        )
