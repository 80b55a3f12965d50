"""Pydantic schemas for th_promo requests and responses."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.th_common.enums import PromoType
from src.th_common.money import cents_to_display
from src.th_promo.domain.models import PromoCode, PromoValidation
from src.th_promo.domain.validator import calculated_status

# ---------------------------------------------------------------------------
# Storefront: validate / apply
# ---------------------------------------------------------------------------


class ValidatePromoRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    order_total_cents: int = Field(..., ge=0)


class ApplyPromoRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class PromoSummary(BaseModel):
    id: str
    code: str
    name: str
    description: str | None
    type: str
    value: int


class DiscountOut(BaseModel):
    amount_cents: int
    amount_display: str
    type: str
    description: str


class PromoValidationResponse(BaseModel):
    valid: bool
    reason: str | None
    message: str
    promo: PromoSummary | None = None
    discount: DiscountOut | None = None

    @classmethod
    def from_domain(cls, v: PromoValidation) -> "PromoValidationResponse":
        if not v.valid or v.promo is None:
            return cls(
                valid=False,
                reason=v.reason.value if v.reason else None,
                message=v.message,
            )
        p = v.promo
        return cls(
            valid=True,
            reason=None,
            message=v.message,
            promo=PromoSummary(
                id=p.id, code=p.code, name=p.name,
                description=p.description, type=p.type, value=p.value,
            ),
            discount=DiscountOut(
                amount_cents=v.discount_cents,
                amount_display=cents_to_display(v.discount_cents),
                type=v.discount_type or p.type,
                description=v.description or "",
            ),
        )


class ApplyPromoResponse(BaseModel):
    code: str
    usage_count: int


# ---------------------------------------------------------------------------
# Admin CRUD
# ---------------------------------------------------------------------------


class CreatePromoRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    type: PromoType
    value: int = Field(..., description="Whole percent for percentage, cents for fixed_amount")
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = Field(None, ge=0)


class UpdatePromoRequest(BaseModel):
    """Partial update: only fields present in the body are changed."""

    code: str | None = Field(None, min_length=1, max_length=64)
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    type: PromoType | None = None
    value: int | None = None
    is_active: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = Field(None, ge=0)


class PromoCodeOut(BaseModel):
    id: str
    code: str
    name: str
    description: str | None
    type: str
    value: int
    is_active: bool
    start_date: str | None
    end_date: str | None
    usage_limit: int | None
    usage_count: int
    created_by: str | None
    created_at: str
    calculated_status: str

    @classmethod
    def from_domain(cls, p: PromoCode, now: datetime | None = None) -> "PromoCodeOut":
        return cls(
            id=p.id,
            code=p.code,
            name=p.name,
            description=p.description,
            type=p.type,
            value=p.value,
            is_active=p.is_active,
            start_date=p.start_date.isoformat() if p.start_date else None,
            end_date=p.end_date.isoformat() if p.end_date else None,
            usage_limit=p.usage_limit,
            usage_count=p.usage_count,
            created_by=p.created_by,
            created_at=p.created_at.isoformat(),
            calculated_status=calculated_status(p, now).value,
        )


class PromoListResponse(BaseModel):
    items: list[PromoCodeOut]
    total: int
    limit: int
    offset: int
    has_more: bool
