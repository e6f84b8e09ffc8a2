"""
PhotoShare Backend — Access Log Middleware
============================================

What:  One log line per HTTP request: method, path, status, duration, request ID.
Why:   Gives operators a request-level view without enabling uvicorn's access
       log (which has no request ID and no duration).
How:   Times the downstream call and picks the log level from the status class:
           5xx → ERROR, 4xx → WARNING, everything else → INFO

Privacy:
    Request bodies, uploaded bytes and the Authorization header are never logged.
    The health probe and static image requests are skipped; they are frequent
    and carry no diagnostic value.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from photoshare.middleware.request_id import request_id_var

logger = logging.getLogger("photoshare.access")

_SKIPPED_PREFIXES = ("/api/health", "/uploads/")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each response with its duration at a level chosen by status code."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(_SKIPPED_PREFIXES):
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
