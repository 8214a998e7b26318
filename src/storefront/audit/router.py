"""Order audit log query endpoints (ADMIN only).

All endpoints in this router are read-only. Order audit logs are immutable
and cannot be created, updated, or deleted through the API.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.dependencies import CurrentIdentity, require_admin
from ..database import get_db
from ..infrastructure.repositories.audit_log_repository import AuditLogRepository
from .schemas import OrderAuditLogListResponse, OrderAuditLogResponse, OrderAuditLogStatsResponse

router = APIRouter(prefix="/audit/order-logs", tags=["Order Audit Logs"])


@router.get(
    "",
    response_model=OrderAuditLogListResponse,
    summary="Query order audit logs (ADMIN only)",
)
async def query_order_audit_logs(
    db: AsyncSession = Depends(get_db),
    admin: CurrentIdentity = Depends(require_admin),
    event_type: Optional[str] = Query(None, description="Filter by event type", examples=["validation_failure"]),
    severity: Optional[str] = Query(None, description="Filter by severity", examples=["critical"]),
    user_id: Optional[str] = Query(None, description="Filter by customer ID"),
    session_id: Optional[str] = Query(None, description="Filter by checkout session ID"),
    start_date: Optional[datetime] = Query(None, description="Minimum timestamp (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, description="Maximum timestamp (ISO 8601)"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(50, ge=1, le=100, description="Entries per page (max 100)"),
) -> OrderAuditLogListResponse:
    """Query order audit logs with filtering and pagination, newest first.

    Example:
        GET /audit/order-logs?severity=critical&page=1&per_page=50
    """
    entries, total = await AuditLogRepository(db).query(
        event_type=event_type,
        severity=severity,
        user_id=user_id,
        session_id=session_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        per_page=per_page,
    )
    return OrderAuditLogListResponse(
        entries=[OrderAuditLogResponse.model_validate(entry) for entry in entries],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/critical",
    response_model=list[OrderAuditLogResponse],
    summary="High and critical violations (ADMIN only)",
)
async def critical_order_violations(
    db: AsyncSession = Depends(get_db),
    admin: CurrentIdentity = Depends(require_admin),
    limit: int = Query(100, ge=1, le=500, description="Maximum entries returned"),
) -> list[OrderAuditLogResponse]:
    entries = await AuditLogRepository(db).critical_violations(limit=limit)
    return [OrderAuditLogResponse.model_validate(entry) for entry in entries]


@router.get(
    "/stats",
    response_model=OrderAuditLogStatsResponse,
    summary="Order audit statistics (ADMIN only)",
    description="Counts per severity, unique users and sessions and the most common first error. Defaults to the last 30 days.",
)
async def order_audit_stats(
    db: AsyncSession = Depends(get_db),
    admin: CurrentIdentity = Depends(require_admin),
    start_date: Optional[datetime] = Query(None, description="Window start (default: 30 days before end)"),
    end_date: Optional[datetime] = Query(None, description="Window end (default: now)"),
) -> OrderAuditLogStatsResponse:
    stats = await AuditLogRepository(db).stats(start_date=start_date, end_date=end_date)
    return OrderAuditLogStatsResponse(
        start_date=stats.start_date,
        end_date=stats.end_date,
        total_violations=stats.total_violations,
        critical_violations=stats.by_severity.get("critical", 0),
        high_violations=stats.by_severity.get("high", 0),
        medium_violations=stats.by_severity.get("medium", 0),
        low_violations=stats.by_severity.get("low", 0),
        unique_users=stats.unique_users,
        unique_sessions=stats.unique_sessions,
        most_common_error=stats.most_common_error,
    )
