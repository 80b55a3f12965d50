"""th_cart REST endpoints.

POST /cart/quote — price a cart without holding or redeeming anything
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.th_cart.application.schemas import CartQuoteRequest
from src.th_cart.application.service import CartApplicationService
from src.th_common.database import get_db_session
from src.th_common.response import ApiResponse, success_response

router = APIRouter(prefix="/cart", tags=["cart"])

_service = CartApplicationService()


@router.post("/quote")
async def quote_cart(
    body: CartQuoteRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.quote(db, body)
    return success_response(result.model_dump(), request)
