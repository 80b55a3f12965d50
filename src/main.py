"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.th_cart.api.router import router as cart_router
from src.th_checkout.api.router import admin_router as holds_admin_router
from src.th_checkout.api.router import router as checkout_router
from src.th_common.database import engine
from src.th_common.errors import AppError, PromoCodeRejectedError
from src.th_common.redis_client import close_redis, get_redis
from src.th_common.response import error_response
from src.th_gateway.middleware.rate_limit import RateLimitMiddleware
from src.th_gateway.middleware.request_log import RequestLogMiddleware
from src.th_pricing.api.router import admin_router as price_drop_admin_router
from src.th_pricing.api.router import router as pricing_router
from src.th_promo.api.router import admin_router as promo_admin_router
from src.th_promo.api.router import router as promo_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    logger.info("%s started", settings.APP_NAME)
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Last added runs first: request ids exist before the rate limiter answers
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, request)
    if isinstance(exc, PromoCodeRejectedError):
        resp.data = {"reason": exc.reason}
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(pricing_router, prefix="/api/v1")
app.include_router(cart_router, prefix="/api/v1")
app.include_router(promo_router, prefix="/api/v1")
app.include_router(checkout_router, prefix="/api/v1")
app.include_router(price_drop_admin_router, prefix="/api/v1")
app.include_router(promo_admin_router, prefix="/api/v1")
app.include_router(holds_admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
