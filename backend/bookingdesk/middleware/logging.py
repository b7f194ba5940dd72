"""
BookingDesk Backend — Request Logging Middleware
==================================================

What:  One access log line per HTTP request.
How:   Measures the time spent below this middleware and logs method, path,
       status, duration, request id and client address on the
       "bookingdesk.access" logger.
When:  Runs inside RequestIDMiddleware so the request id is already set.

Log level follows the status code:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies (images, names) and the Authorization header are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bookingdesk.middleware.request_id import request_id_var

logger = logging.getLogger("bookingdesk.access")

# Probes hit these every few seconds
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        logger.log(
            level_for_status(status),
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
