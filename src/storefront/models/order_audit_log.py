"""OrderAuditLog SQLAlchemy model"""

import uuid
from contextlib import contextmanager

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Text, Uuid, event, inspect
from sqlalchemy.orm import Session, object_session
from sqlalchemy.sql import func

from .base import Base, PortableJSONB

AUDIT_CORRECTION_KEY = "audit_correction"

# Columns an administrative correction may change; updated_at is touched automatically.
CORRECTABLE_COLUMNS = frozenset({"additional_context", "updated_at"})


class AuditLogImmutableError(Exception):
    """Raised when an order audit log row would be updated or deleted."""
    pass


class OrderAuditLog(Base):
    """Append-only audit trail of order validation events.

    Rows are inserted once and never changed. The only exception is the
    administrative correction path (see ``audit_correction``), which may
    amend ``additional_context``; ``updated_at`` is refreshed on that path.
    """
    __tablename__ = "order_audit_logs"
    __table_args__ = (
        CheckConstraint(
            "event_type IN ('validation_failure', 'validation_warning', 'order_blocked', 'suspicious_activity')",
            name="ck_order_audit_logs_event_type",
        ),
        CheckConstraint(
            "severity IN ('low', 'medium', 'high', 'critical')",
            name="ck_order_audit_logs_severity",
        ),
        Index("idx_order_audit_logs_timestamp", "timestamp"),
        Index("idx_order_audit_logs_user_id", "user_id"),
        Index("idx_order_audit_logs_event_type", "event_type"),
        Index("idx_order_audit_logs_severity", "severity"),
        Index("idx_order_audit_logs_session_id", "session_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    event_type = Column(Text, nullable=False)
    user_id = Column(Text, nullable=True)
    session_id = Column(Text, nullable=False)
    order_data = Column(PortableJSONB, nullable=False)
    validation_errors = Column(PortableJSONB, nullable=False)
    severity = Column(Text, nullable=False)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    additional_context = Column(PortableJSONB, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


@contextmanager
def audit_correction(session: Session):
    """Allow amending ``additional_context`` of audit rows within this block.

    Example:
        with audit_correction(session):
            entry.additional_context = {"note": "false positive"}
            await session.commit()
    """
    session.info[AUDIT_CORRECTION_KEY] = True
    try:
        yield session
    finally:
        session.info.pop(AUDIT_CORRECTION_KEY, None)


@event.listens_for(OrderAuditLog, "before_update")
def _reject_audit_update(mapper, connection, target):
    session = object_session(target)
    if session is None or not session.info.get(AUDIT_CORRECTION_KEY):
        raise AuditLogImmutableError(f"Order audit log {target.id} is immutable")

    state = inspect(target)
    changed = {
        attr.key for attr in state.attrs
        if attr.history.has_changes()
    }
    forbidden = changed - CORRECTABLE_COLUMNS
    if forbidden:
        raise AuditLogImmutableError(
            f"Correction may only amend additional_context, not: {', '.join(sorted(forbidden))}"
        )


@event.listens_for(OrderAuditLog, "before_delete")
def _reject_audit_delete(mapper, connection, target):
    raise AuditLogImmutableError(f"Order audit log {target.id} cannot be deleted")
