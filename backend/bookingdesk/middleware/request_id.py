"""
BookingDesk Backend — Request ID Middleware
=============================================

What:  Tags every request with a correlation id and echoes it back.
How:   Reuses an incoming X-Request-ID header or generates a short uuid4,
       stores it in a ContextVar and on request.state, and sets the
       X-Request-ID response header.
Who:   Applied to every request. Loggers in the auth gate, the exception
       handlers and the access log read `request_id_var`.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests share a thread but not this value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns the request id before any other processing happens."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
