"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class ListingStatus(str, Enum):
    ACTIVE = "active"
    PROCESSING = "processing"
    SOLD = "sold"
    INACTIVE = "inactive"


class DeliveryCategory(str, Enum):
    NORMAL = "NORMAL"
    BULK = "BULK"


class DeliveryMethod(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


class PromoType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"


class PromoStatus(str, Enum):
    """Derived status shown in admin listings — not stored."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    SCHEDULED = "scheduled"
    LIMIT_REACHED = "limit_reached"


class PromoRejection(str, Enum):
    """Why a promo code was refused, first failing check wins."""
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    NOT_STARTED = "NOT_STARTED"
    EXPIRED = "EXPIRED"
    LIMIT_REACHED = "LIMIT_REACHED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
