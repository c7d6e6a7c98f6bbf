"""
Tessa Backend — Health Check Route
====================================

Status levels:
    healthy:   database reachable and Gemini usable
    degraded:  database reachable, Gemini unavailable or circuit open
    unhealthy: database unreachable (HTTP 503)

The Gemini check reads circuit-breaker state and configuration only; it
never spends API quota.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tessa import __version__
from tessa.database import engine
from tessa.schemas.common import HealthResponse
from tessa.services.gemini_service import gemini_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def check_database() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return "disconnected"
    return "connected"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    db_status = await check_database()
    gemini_status = gemini_client.health_status()

    if db_status != "connected":
        overall = "unhealthy"
    elif gemini_status != "available":
        overall = "degraded"
    else:
        overall = "healthy"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
