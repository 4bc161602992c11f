"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from social_insurance_engine import __version__
from social_insurance_engine.api.dependencies import DbSession
from social_insurance_engine.calculators.grade_table import STANDARD_GRADE_TABLE, check_table
from social_insurance_engine.config import get_settings
from social_insurance_engine.models import GradeBandRecord, RateTableRecord

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str
    version: str
    engine_version: str
    reference_grade_bands: int
    stored_grade_bands: int | None = None
    stored_rate_tables: int | None = None


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession) -> HealthResponse:
    """Check the database and report the reference data available to calculations."""
    db_status = "unhealthy"
    grade_bands = rate_tables = None
    try:
        grade_bands = await db.scalar(select(func.count()).select_from(GradeBandRecord))
        rate_tables = await db.scalar(select(func.count()).select_from(RateTableRecord))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.exception("Database health check failed")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        version=__version__,
        engine_version=get_settings().engine_version,
        reference_grade_bands=len(STANDARD_GRADE_TABLE),
        stored_grade_bands=grade_bands,
        stored_rate_tables=rate_tables,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    """Ready once the built-in grade table is consistent."""
    problems = check_table(STANDARD_GRADE_TABLE)
    if problems:
        logger.error("Reference grade table is inconsistent: %s", "; ".join(problems))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reference grade table is inconsistent",
        )
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
