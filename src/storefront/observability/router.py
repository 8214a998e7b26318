"""Prometheus scrape endpoint and health check."""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from .health import HealthStatus, check_health

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    summary="Health check",
    description="Database connectivity and order audit table readability. 503 when either fails.",
)
async def health_check(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    report = await check_health(db)
    healthy = report.status == HealthStatus.HEALTHY
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=report.to_dict(),
    )
