"""
Pastebin Backend - Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the paste store and the cache through the running PasteService.

Status levels:
    - healthy:   store and cache reachable (HTTP 200)
    - degraded:  cache unreachable; reads fall through to the store (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response

from pastebin import __version__
from pastebin.dependencies import ServiceDep
from pastebin.schemas.paste import HealthResponse
from pastebin.services.paste_cache import NullPasteCache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(service: ServiceDep, response: Response) -> HealthResponse:
    db_status = "connected"
    cache_status = "available"
    overall = "healthy"

    if not await service.store.ping():
        db_status = "disconnected"
        overall = "unhealthy"

    if isinstance(service.cache, NullPasteCache):
        cache_status = "disabled"
    elif not await service.cache.ping():
        cache_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        cache=cache_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
