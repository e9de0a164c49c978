# app/api/routes/health.py
import logging
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.session import get_db

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """
    Response schema for the liveness endpoint.
    """

    status: str = Field(
        ...,
        description="Overall health status of the SiteLog service.",
        examples=["ok"],
    )
    app_name: str = Field(..., examples=["SiteLog"])
    environment: str = Field(
        ...,
        description="Current deployment environment (local/dev/stage/prod).",
        examples=["local"],
    )
    timestamp_utc: datetime = Field(
        ...,
        description="Server-side timestamp (UTC) at which this check was generated.",
    )


class ReadinessResponse(BaseModel):
    status: str = Field(..., examples=["ready"])
    database: str = Field(..., examples=["connected"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check for the SiteLog service",
    description=(
        "Lightweight endpoint to verify that the SiteLog backend is up and "
        "responding. Does not touch the database; use `/health/ready` for that."
    ),
)
async def health_check() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status="ok",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check (application and database)",
    responses={503: {"description": "The database is unreachable."}},
)
async def readiness_check(
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> ReadinessResponse:
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Readiness check failed")
        response.status_code = HTTPStatus.SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not_ready", database="disconnected")

    return ReadinessResponse(status="ready", database="connected")
