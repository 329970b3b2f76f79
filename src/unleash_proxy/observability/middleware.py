"""
unleash_proxy.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs.
- Bind request metadata into structlog contextvars.
- Emit one access log line per request (probe and scrape endpoints excluded).
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from unleash_proxy.observability.logging import get_logger

log = get_logger(__name__)

# Kubernetes probes and Prometheus scrapes would drown the access log.
_QUIET_PATHS = frozenset({"/isAlive", "/isReady", "/metrics"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    - Ensures every request has a request id
    - Binds request-scoped contextvars for structured logs
    - Logs method/path/status/duration once the response is produced
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
            if request.url.path.rstrip("/") not in _QUIET_PATHS:
                log.info(
                    "request_completed",
                    status=response.status_code,
                    duration_ms=round((time.perf_counter() - start) * 1000, 3),
                    remote_addr=request.client.host if request.client else None,
                    user_agent=request.headers.get("user-agent", ""),
                )
        finally:
            # Avoid leaking context across requests under async concurrency.
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response


# --- Module Notes -----------------------------------------------------------
# Trace ids are added by the logging processor chain, not here, so handler logs carry them too.
