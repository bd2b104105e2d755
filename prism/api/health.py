"""
Health check endpoints.

Liveness and readiness probes; readiness checks the database.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from prism.db.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the database cannot be queried.
    """
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed: %s", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")
    return HealthResponse(status="ready", database="connected")
