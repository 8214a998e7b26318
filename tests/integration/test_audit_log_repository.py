"""Integration tests for the append-only order audit log

Tests cover:
- Appending entries and reading them back
- Filtering, pagination and the critical view
- Statistics over a time window
- Update and delete rejection, administrative correction
- The store writing in its own transaction
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from factories import build_authenticated_draft, build_guest_draft

from storefront.audit.models import AuditEventType, AuditLogEntry, AuditSeverity
from storefront.audit.sanitize import sanitize_order_data
from storefront.domain.validation.models import ValidationCode, ValidationError
from storefront.infrastructure.repositories.audit_log_repository import (
    AuditLogRepository,
    SqlAuditLogStore,
)
from storefront.models.order_audit_log import (
    AuditLogImmutableError,
    OrderAuditLog,
    audit_correction,
)

pytestmark = pytest.mark.integration

NOW = datetime.now(timezone.utc)


def _entry(
    code: ValidationCode = ValidationCode.MISSING_NAME,
    severity: AuditSeverity = AuditSeverity.LOW,
    event_type: AuditEventType = AuditEventType.VALIDATION_FAILURE,
    session_id: str = "session_1767528000000_aaaaaaaaa",
    user_id=None,
    timestamp: datetime = NOW,
) -> AuditLogEntry:
    draft = build_authenticated_draft(user_id=user_id) if user_id else build_guest_draft()
    return AuditLogEntry(
        timestamp=timestamp,
        event_type=event_type,
        session_id=session_id,
        order_data=sanitize_order_data(draft),
        validation_errors=[ValidationError.error("field", code, f"{code.value} message")],
        severity=severity,
        user_id=user_id,
        ip_address="192.168.1.100",
        user_agent="pytest",
    )


@pytest.fixture
async def seeded(db_session):
    """Four entries in the last few minutes and one from 45 days ago."""
    entries = [
        _entry(ValidationCode.CART_EMPTY, AuditSeverity.CRITICAL, session_id="session_1_a",
               user_id="user-1", timestamp=NOW - timedelta(minutes=3)),
        _entry(ValidationCode.MAXIMUM_ORDER_EXCEEDED, AuditSeverity.HIGH, session_id="session_2_b",
               user_id="user-1", timestamp=NOW - timedelta(minutes=2)),
        _entry(ValidationCode.CART_EMPTY, AuditSeverity.CRITICAL, session_id="session_3_c",
               timestamp=NOW - timedelta(minutes=1)),
        _entry(ValidationCode.LARGE_QUANTITY, AuditSeverity.LOW, session_id="session_3_c",
               event_type=AuditEventType.VALIDATION_WARNING, timestamp=NOW),
        _entry(session_id="session_old", timestamp=NOW - timedelta(days=45)),
    ]
    repo = AuditLogRepository(db_session)
    rows = [await repo.append(entry) for entry in entries]
    await db_session.commit()
    return rows


class TestAppend:

    async def test_round_trip(self, db_session, session_factory):
        row = await AuditLogRepository(db_session).append(
            _entry(ValidationCode.PRODUCT_NOT_FOUND, AuditSeverity.CRITICAL)
        )
        await db_session.commit()

        async with session_factory() as session:
            stored = await AuditLogRepository(session).get(row.id)

        assert stored.event_type == "validation_failure"
        assert stored.severity == "critical"
        assert stored.validation_errors == [{
            "field": "field",
            "message": "PRODUCT_NOT_FOUND message",
            "code": "PRODUCT_NOT_FOUND",
            "severity": "error",
        }]
        assert stored.order_data["customer_info"]["email"] == "ja**@example.com"
        assert stored.ip_address == "192.168.1.100"
        assert stored.created_at is not None


class TestQuery:

    async def test_newest_first(self, db_session, seeded):
        entries, total = await AuditLogRepository(db_session).query()

        assert total == 5
        assert [e.session_id for e in entries[:2]] == ["session_3_c", "session_3_c"]
        assert entries[-1].session_id == "session_old"

    async def test_filters(self, db_session, seeded):
        repo = AuditLogRepository(db_session)

        critical, total = await repo.query(severity="critical")
        assert total == 2
        assert {e.severity for e in critical} == {"critical"}

        warnings, _ = await repo.query(event_type="validation_warning")
        assert [e.validation_errors[0]["code"] for e in warnings] == ["LARGE_QUANTITY"]

        by_user, total = await repo.query(user_id="user-1")
        assert total == 2

        by_session, total = await repo.query(session_id="session_3_c")
        assert total == 2

        recent, total = await repo.query(start_date=NOW - timedelta(days=1))
        assert total == 4

    async def test_pagination(self, db_session, seeded):
        repo = AuditLogRepository(db_session)

        first, total = await repo.query(page=1, per_page=2)
        third, _ = await repo.query(page=3, per_page=2)

        assert total == 5
        assert len(first) == 2
        assert [e.session_id for e in third] == ["session_old"]


class TestCriticalViolations:

    async def test_high_and_critical_newest_first(self, db_session, seeded):
        entries = await AuditLogRepository(db_session).critical_violations()

        assert [e.session_id for e in entries] == ["session_3_c", "session_2_b", "session_1_a"]

    async def test_limit(self, db_session, seeded):
        entries = await AuditLogRepository(db_session).critical_violations(limit=1)

        assert len(entries) == 1


class TestStats:

    async def test_default_window_is_thirty_days(self, db_session, seeded):
        stats = await AuditLogRepository(db_session).stats()

        assert stats.total_violations == 4
        assert stats.by_severity == {"low": 1, "medium": 0, "high": 1, "critical": 2}
        assert stats.unique_users == 1
        assert stats.unique_sessions == 3
        assert stats.most_common_error == "CART_EMPTY"
        assert stats.end_date - stats.start_date == timedelta(days=30)

    async def test_explicit_window(self, db_session, seeded):
        stats = await AuditLogRepository(db_session).stats(
            start_date=NOW - timedelta(days=60),
            end_date=NOW - timedelta(days=30),
        )

        assert stats.total_violations == 1
        assert stats.most_common_error == "MISSING_NAME"

    async def test_empty_window(self, db_session):
        stats = await AuditLogRepository(db_session).stats()

        assert stats.total_violations == 0
        assert stats.most_common_error is None


class TestImmutability:

    async def test_update_is_rejected(self, db_session, seeded):
        row = seeded[0]
        row.severity = "low"

        with pytest.raises(AuditLogImmutableError):
            await db_session.flush()

    async def test_delete_is_rejected(self, db_session, seeded):
        await db_session.delete(seeded[0])

        with pytest.raises(AuditLogImmutableError):
            await db_session.flush()

    async def test_correction_may_amend_context_only(self, db_session, seeded):
        row = await AuditLogRepository(db_session).amend_context(
            seeded[0].id, {"reviewed_by": "admin", "note": "test order"}
        )

        assert row.additional_context == {"reviewed_by": "admin", "note": "test order"}
        assert row.severity == "critical"

    async def test_correction_cannot_change_other_columns(self, db_session, seeded):
        row = seeded[0]
        with audit_correction(db_session.sync_session):
            row.additional_context = {"note": "ok"}
            row.validation_errors = []
            with pytest.raises(AuditLogImmutableError):
                await db_session.flush()

    async def test_amend_unknown_entry(self, db_session):
        assert await AuditLogRepository(db_session).amend_context(uuid4(), {}) is None


class TestSqlAuditLogStore:

    async def test_commits_in_its_own_session(self, db_session, session_factory):
        await SqlAuditLogStore(session_factory).append(_entry(session_id="session_store_test"))

        count = await db_session.scalar(
            select(func.count()).select_from(OrderAuditLog).where(OrderAuditLog.session_id == "session_store_test")
        )
        assert count == 1

    async def test_survives_rollback_of_other_session(self, db_session, session_factory):
        db_session.add(OrderAuditLog(
            event_type="validation_failure",
            session_id="session_rolled_back",
            order_data={},
            validation_errors=[],
            severity="low",
        ))
        await SqlAuditLogStore(session_factory).append(_entry(session_id="session_kept"))
        await db_session.rollback()

        _, kept = await AuditLogRepository(db_session).query(session_id="session_kept")
        _, rolled_back = await AuditLogRepository(db_session).query(session_id="session_rolled_back")
        assert kept == 1
        assert rolled_back == 0
