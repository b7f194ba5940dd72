"""
BookingDesk Backend — Health Check Route
==========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the document store and the object store held on app.state.
Who:   Called by container health checks, load balancers and monitoring.

Status levels:
    - healthy:   both stores reachable (HTTP 200)
    - degraded:  object store unreachable; records still served (HTTP 200)
    - unhealthy: document store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from bookingdesk import __version__
from bookingdesk.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Document store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    document_store_status = "connected"
    object_store_status = "available"
    overall = "healthy"

    # ── Check Document Store ──────────────────────────────────────────────
    if not await request.app.state.document_store.ping():
        document_store_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: document store unreachable")

    # ── Check Object Store ────────────────────────────────────────────────
    if not await request.app.state.object_store.ping():
        object_store_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall
        logger.warning("Health check: object store unreachable")

    body = HealthResponse(
        status=overall,
        version=__version__,
        document_store=document_store_status,
        object_store=object_store_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=503 if overall == "unhealthy" else 200,
        content=body.model_dump(by_alias=True),
    )
