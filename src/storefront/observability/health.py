"""Readiness probes for the checkout path.

Checkout needs two things from the database: a working connection and a
readable order audit table (orders are refused when the audit trail cannot
be written).
"""

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.order_audit_log import OrderAuditLog
from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class HealthReport:
    components: dict[str, ComponentHealth] = field(default_factory=dict)

    @property
    def status(self) -> HealthStatus:
        if all(c.status == HealthStatus.HEALTHY for c in self.components.values()):
            return HealthStatus.HEALTHY
        return HealthStatus.UNHEALTHY

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "components": {name: c.to_dict() for name, c in self.components.items()},
        }


async def _probe(name: str, db: AsyncSession, statement, ok_message: str) -> ComponentHealth:
    started = time.perf_counter()
    try:
        await db.execute(statement)
    except SQLAlchemyError as e:
        logger.error(f"{name} health check failed: {e}")
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message=f"{name} unavailable: {e}")
    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message=ok_message,
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
    )


async def check_database_health(db: AsyncSession) -> ComponentHealth:
    return await _probe("Database", db, text("SELECT 1"), "Database connection OK")


async def check_audit_log_health(db: AsyncSession) -> ComponentHealth:
    return await _probe(
        "Order audit log",
        db,
        select(OrderAuditLog.id).limit(1),
        "Order audit log readable",
    )


async def check_health(db: AsyncSession) -> HealthReport:
    report = HealthReport()
    report.components["database"] = await check_database_health(db)
    if report.components["database"].status == HealthStatus.HEALTHY:
        report.components["order_audit_log"] = await check_audit_log_health(db)
    return report
