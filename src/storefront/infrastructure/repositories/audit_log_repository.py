"""Order audit log repository.

The table is append-only: this repository inserts and reads, and the only
write besides ``append`` is ``amend_context`` on the administrative
correction path. Row-level guards on the model reject everything else.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...audit.models import AuditLogEntry, AuditSeverity
from ...audit.port import AuditLogStorePort
from ...models.order_audit_log import OrderAuditLog, audit_correction

DEFAULT_STATS_WINDOW = timedelta(days=30)


@dataclass
class AuditLogStats:
    """Aggregates over a time window."""
    start_date: datetime
    end_date: datetime
    total_violations: int = 0
    by_severity: dict[str, int] = field(default_factory=dict)
    unique_users: int = 0
    unique_sessions: int = 0
    most_common_error: Optional[str] = None


def entry_to_model(entry: AuditLogEntry) -> OrderAuditLog:
    return OrderAuditLog(
        timestamp=entry.timestamp,
        event_type=entry.event_type.value,
        user_id=entry.user_id,
        session_id=entry.session_id,
        order_data=entry.order_data,
        validation_errors=[error.to_dict() for error in entry.validation_errors],
        severity=entry.severity.value,
        ip_address=entry.ip_address,
        user_agent=entry.user_agent,
        additional_context=entry.additional_context,
    )


class AuditLogRepository:
    """Repository for order_audit_logs database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, entry: AuditLogEntry) -> OrderAuditLog:
        """Insert one entry (flushed, not committed)."""
        row = entry_to_model(entry)
        self.session.add(row)
        await self.session.flush()
        return row

    async def get(self, log_id: UUID) -> Optional[OrderAuditLog]:
        return await self.session.get(OrderAuditLog, log_id)

    async def query(
        self,
        event_type: Optional[str] = None,
        severity: Optional[str] = None,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[list[OrderAuditLog], int]:
        """Filtered, paginated entries, newest first.

        Returns:
            (entries on the requested page, total matching entries)
        """
        conditions = []
        if event_type:
            conditions.append(OrderAuditLog.event_type == event_type)
        if severity:
            conditions.append(OrderAuditLog.severity == severity)
        if user_id:
            conditions.append(OrderAuditLog.user_id == user_id)
        if session_id:
            conditions.append(OrderAuditLog.session_id == session_id)
        if start_date:
            conditions.append(OrderAuditLog.timestamp >= start_date)
        if end_date:
            conditions.append(OrderAuditLog.timestamp <= end_date)

        total = await self.session.scalar(
            select(func.count()).select_from(OrderAuditLog).where(*conditions)
        )

        offset = (page - 1) * per_page
        result = await self.session.execute(
            select(OrderAuditLog)
            .where(*conditions)
            .order_by(OrderAuditLog.timestamp.desc())
            .offset(offset)
            .limit(per_page)
        )
        return list(result.scalars().all()), total or 0

    async def critical_violations(self, limit: int = 100) -> list[OrderAuditLog]:
        """High and critical entries, newest first."""
        result = await self.session.execute(
            select(OrderAuditLog)
            .where(OrderAuditLog.severity.in_([AuditSeverity.HIGH.value, AuditSeverity.CRITICAL.value]))
            .order_by(OrderAuditLog.timestamp.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def stats(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> AuditLogStats:
        """Counts over [start_date, end_date] (default: the last 30 days).

        ``most_common_error`` is the most frequent code among each entry's
        first validation error.
        """
        end_date = end_date or datetime.now(timezone.utc)
        start_date = start_date or end_date - DEFAULT_STATS_WINDOW
        in_window = (
            OrderAuditLog.timestamp >= start_date,
            OrderAuditLog.timestamp <= end_date,
        )

        totals = await self.session.execute(
            select(
                func.count(),
                func.count(distinct(OrderAuditLog.user_id)),
                func.count(distinct(OrderAuditLog.session_id)),
            ).where(*in_window)
        )
        total, unique_users, unique_sessions = totals.one()

        severity_rows = await self.session.execute(
            select(OrderAuditLog.severity, func.count())
            .where(*in_window)
            .group_by(OrderAuditLog.severity)
        )
        by_severity = {severity.value: 0 for severity in AuditSeverity}
        by_severity.update({severity: count for severity, count in severity_rows.all()})

        errors_rows = await self.session.execute(
            select(OrderAuditLog.validation_errors).where(*in_window)
        )
        first_codes = Counter(
            errors[0].get("code")
            for errors in errors_rows.scalars().all()
            if errors
        )
        most_common = first_codes.most_common(1)

        return AuditLogStats(
            start_date=start_date,
            end_date=end_date,
            total_violations=total,
            by_severity=by_severity,
            unique_users=unique_users,
            unique_sessions=unique_sessions,
            most_common_error=most_common[0][0] if most_common else None,
        )

    async def amend_context(self, log_id: UUID, additional_context: dict) -> Optional[OrderAuditLog]:
        """Administrative correction: replace ``additional_context`` only.

        Commits the session. Returns None when the entry does not exist.
        """
        row = await self.get(log_id)
        if row is None:
            return None

        with audit_correction(self.session.sync_session):
            row.additional_context = additional_context
            await self.session.commit()

        await self.session.refresh(row)
        return row


class SqlAuditLogStore(AuditLogStorePort):
    """AuditLogStorePort writing each entry in its own session and transaction.

    Independent of the checkout's session: a rolled-back checkout keeps its
    audit rows and a failed audit write leaves the checkout untouched.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def append(self, entry: AuditLogEntry) -> None:
        async with self.session_factory() as session:
            await AuditLogRepository(session).append(entry)
            await session.commit()
