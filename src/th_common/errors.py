"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Listing / pricing
  3xxx: Cart / checkout / order
  4xxx: Promo code
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Admin access required", 403)


# --- 2xxx: Listing / pricing ---

class ListingNotFoundError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(2001, f"Listing not found: {listing_id}", 404)


class ListingUnavailableError(AppError):
    def __init__(self, title: str) -> None:
        super().__init__(2002, f'Item "{title}" is no longer available', 409)


class ListingHeldError(AppError):
    def __init__(self, title: str) -> None:
        super().__init__(
            2003,
            f'Item "{title}" is currently being purchased by another buyer',
            409,
        )


# --- 3xxx: Cart / checkout / order ---

class DuplicateCartLineError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3001, f"Listing appears more than once in cart: {listing_id}", 422)


class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(3002, f"Order not found: {order_id}", 404)


# --- 4xxx: Promo code ---

class PromoCodeNotFoundError(AppError):
    def __init__(self, promo_id: str) -> None:
        super().__init__(4001, f"Promo code not found: {promo_id}", 404)


class PromoCodeRejectedError(AppError):
    """Raised at checkout/apply time; `reason` is a PromoRejection value."""

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(4002, message, 422)


class PromoCodeExistsError(AppError):
    def __init__(self, code: str) -> None:
        super().__init__(4003, f"Promo code already exists: {code}", 409)


class InvalidPromoCodeError(AppError):
    """Admin create/update payload failed a business rule."""

    def __init__(self, detail: str) -> None:
        super().__init__(4004, detail, 400)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)
