"""th_promo REST endpoints.

POST   /promo-codes/validate          — eligibility + discount preview (no side effects)
POST   /promo-codes/apply             — atomically count one use
GET    /admin/promo-codes             — list with status/search filters
POST   /admin/promo-codes             — create
GET    /admin/promo-codes/{promo_id}  — detail
PUT    /admin/promo-codes/{promo_id}  — partial update
DELETE /admin/promo-codes/{promo_id}  — delete
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.th_common.database import get_db_session
from src.th_common.response import ApiResponse, success_response
from src.th_gateway.auth.dependencies import CurrentUser, get_current_user, require_admin
from src.th_promo.application.schemas import (
    ApplyPromoRequest,
    CreatePromoRequest,
    UpdatePromoRequest,
    ValidatePromoRequest,
)
from src.th_promo.application.service import PromoApplicationService

router = APIRouter(prefix="/promo-codes", tags=["promo-codes"])
admin_router = APIRouter(prefix="/admin/promo-codes", tags=["admin"])

_service = PromoApplicationService()


@router.post("/validate")
async def validate_promo(
    body: ValidatePromoRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.validate_code(db, body.code, body.order_total_cents)
    return success_response(result.model_dump(), request)


@router.post("/apply")
async def apply_promo(
    body: ApplyPromoRequest,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.apply_code(db, body.code)
    return success_response(result.model_dump(), request)


@admin_router.get("")
async def list_promos(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: Literal["active", "expired", "inactive"] | None = Query(None),
    search: str | None = Query(None, max_length=64),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    result = await _service.list_promos(db, status, search, limit, offset)
    return success_response(result.model_dump(), request)


@admin_router.post("", status_code=201)
async def create_promo(
    body: CreatePromoRequest,
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_promo(db, body, admin.id)
    resp = success_response(result.model_dump(), request)
    resp.message = "Promo code created successfully"
    return resp


@admin_router.get("/{promo_id}")
async def get_promo(
    promo_id: str,
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_promo(db, promo_id)
    return success_response(result.model_dump(), request)


@admin_router.put("/{promo_id}")
async def update_promo(
    promo_id: str,
    body: UpdatePromoRequest,
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.update_promo(db, promo_id, body)
    return success_response(result.model_dump(), request)


@admin_router.delete("/{promo_id}")
async def delete_promo(
    promo_id: str,
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.delete_promo(db, promo_id)
    resp = success_response(None, request)
    resp.message = "Promo code deleted successfully"
    return resp
