"""Request logging middleware.

Every request gets a request id: the storefront's X-Request-ID when it sends
a sane one, otherwise a fresh "req_<12 hex>". The id lands on request.state
(routers echo it in the ApiResponse envelope) and on the X-Request-ID
response header, so a storefront error can be traced to one log line:

    INFO [POST] /api/v1/checkout -> 201 (23ms) req_a1b2c3d4e5f6 ip=203.0.113.7
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.th_gateway.middleware.rate_limit import client_ip

logger = logging.getLogger("th.request")

REQUEST_ID_HEADER = "X-Request-ID"
_UPSTREAM_ID = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def resolve_request_id(request: Request) -> str:
    upstream = request.headers.get(REQUEST_ID_HEADER)
    if upstream and _UPSTREAM_ID.match(upstream):
        return upstream
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request)
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "[%s] %s -> %d (%.0fms) %s ip=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
            client_ip(request),
        )
        return response
