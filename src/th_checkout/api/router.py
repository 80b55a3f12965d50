"""th_checkout REST endpoints.

POST /checkout                       — create a held, pending order from cart items
GET  /orders/{order_id}              — buyer's own order
POST /admin/holds/release-expired    — release expired holds, expire stale orders
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.th_checkout.application.schemas import CheckoutRequest
from src.th_checkout.application.service import CheckoutApplicationService
from src.th_common.database import get_db_session
from src.th_common.response import ApiResponse, success_response
from src.th_gateway.auth.dependencies import CurrentUser, get_current_user, require_admin

router = APIRouter(tags=["checkout"])
admin_router = APIRouter(prefix="/admin/holds", tags=["admin"])

_service = CheckoutApplicationService()


@router.post("/checkout", status_code=201)
async def checkout(
    body: CheckoutRequest,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.checkout(db, current_user.id, body)
    return success_response(result.model_dump(), request)


@router.get("/orders/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_order(db, order_id, current_user.id)
    return success_response(result.model_dump(), request)


@admin_router.post("/release-expired")
async def release_expired_holds(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.release_expired_holds(db)
    return success_response(result.model_dump(), request)
