"""Fixed-window rate limiting for the promo-code endpoints.

Promo codes are short and guessable, so validate/apply are capped per
client IP to stop enumeration. Other paths pass straight through.

  key:    "ratelimit:promo:{client_ip}:{window_start}"
  window: 60 seconds, limit from settings.PROMO_RATE_LIMIT_PER_MINUTE

Client IP is the socket peer. Behind TRUSTED_PROXY_COUNT reverse proxies it is
the X-Forwarded-For hop those proxies recorded, counted from the right;
hops further left are client-supplied and ignored.
"""

import logging
import time
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.th_common.errors import RateLimitError
from src.th_common.redis_client import get_redis, hit_window
from src.th_common.response import error_response

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
PROMO_PATH_PREFIX = "/api/v1/promo-codes/"


def client_ip(request: Request, trusted_proxies: int | None = None) -> str:
    if trusted_proxies is None:
        trusted_proxies = settings.TRUSTED_PROXY_COUNT
    peer = request.client.host if request.client else "unknown"
    if trusted_proxies <= 0:
        return peer

    hops = [h.strip() for h in request.headers.get("x-forwarded-for", "").split(",") if h.strip()]
    if len(hops) < trusted_proxies:
        return peer
    return hops[-trusted_proxies]


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit: int | None = None,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        trusted_proxies: int | None = None,
    ) -> None:
        super().__init__(app)
        self._trusted_proxies = trusted_proxies
        self._limit = limit if limit is not None else settings.PROMO_RATE_LIMIT_PER_MINUTE
        self._redis_factory = redis_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(PROMO_PATH_PREFIX):
            return await call_next(request)

        window = int(time.time()) // WINDOW_SECONDS
        key = f"ratelimit:promo:{client_ip(request, self._trusted_proxies)}:{window}"
        try:
            count = await hit_window(await self._redis_factory(), key, WINDOW_SECONDS)
        except RedisError:
            # Redis outage must not take checkout down with it
            logger.warning("Rate limit check skipped, redis unavailable", exc_info=True)
            return await call_next(request)

        if count > self._limit:
            err = RateLimitError()
            body = error_response(err.code, err.message, request)
            return JSONResponse(
                status_code=err.http_status,
                content=body.model_dump(),
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )
        return await call_next(request)
