"""
Product API - Liveness and Health Routes
==========================================

What:  GET / (static liveness text) and GET /health (store probe).
How:   / never touches the store; /health runs SELECT 1 through the
       Database handle on app.state.
Who:   Called by load balancers, container health checks and humans.

Status levels (/health):
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from product_api import __version__
from product_api.database import Database, get_database
from product_api.schemas.product import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

LIVENESS_TEXT = "Product API is running"

# Module load time, used for uptime reporting
_start_time = time.time()


@router.get(
    "/",
    response_class=PlainTextResponse,
    summary="Liveness check",
)
async def root() -> str:
    return LIVENESS_TEXT


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    database: Database = Depends(get_database),
) -> HealthResponse:
    """
    Probe the store and report aggregate status.

    The probe is a SELECT 1, cheap enough for frequent polling.
    """
    if await database.ping():
        db_status, overall = "connected", "healthy"
    else:
        db_status, overall = "disconnected", "unhealthy"
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
