"""Purchase eligibility for a listing at checkout time."""

from datetime import datetime

from src.th_common.datetime_utils import as_utc
from src.th_common.enums import ListingStatus
from src.th_common.errors import ListingHeldError, ListingUnavailableError
from src.th_pricing.domain.models import Listing


def is_held_at(listing: Listing, now: datetime) -> bool:
    return bool(
        listing.is_held
        and listing.held_until is not None
        and as_utc(now) < as_utc(listing.held_until)
    )


def ensure_purchasable(listing: Listing, now: datetime) -> None:
    """Raises ListingUnavailableError / ListingHeldError when the item cannot be bought."""
    if listing.status != ListingStatus.ACTIVE.value:
        raise ListingUnavailableError(listing.title)
    if is_held_at(listing, now):
        raise ListingHeldError(listing.title)
