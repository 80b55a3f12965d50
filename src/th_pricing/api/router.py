"""th_pricing REST endpoints.

GET  /pricing/schedules                 — static discount schedules
GET  /listings/{listing_id}/pricing     — current price + next drop
POST /admin/price-drops/process         — persist due price drops (cron target)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.th_common.database import get_db_session
from src.th_common.response import ApiResponse, success_response
from src.th_gateway.auth.dependencies import CurrentUser, require_admin
from src.th_pricing.application.service import PricingApplicationService

router = APIRouter(tags=["pricing"])
admin_router = APIRouter(prefix="/admin/price-drops", tags=["admin"])

_service = PricingApplicationService()


@router.get("/pricing/schedules")
async def list_schedules(request: Request) -> ApiResponse:
    return success_response(_service.list_schedules().model_dump(), request)


@router.get("/listings/{listing_id}/pricing")
async def get_listing_pricing(
    listing_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_listing_pricing(db, listing_id)
    return success_response(result.model_dump(), request)


@admin_router.post("/process")
async def process_price_drops(
    request: Request,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.process_price_drops(db)
    resp = success_response(result.model_dump(), request)
    resp.message = "Price drops processed successfully"
    return resp
