"""Audit domain models.

AuditLogEntry is the in-memory form of one order_audit_logs row. It is built
by OrderAuditLogger and handed to an AuditLogStorePort for persistence.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..domain.validation.models import ValidationError


class AuditEventType(str, Enum):
    VALIDATION_FAILURE = "validation_failure"
    VALIDATION_WARNING = "validation_warning"
    ORDER_BLOCKED = "order_blocked"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"


class AuditSeverity(str, Enum):
    """Audit severity tiers, lowest to highest."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class AuditRequestContext:
    """Client information captured from the HTTP request, if any."""
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class AuditLogEntry:
    """One audit record.

    ``order_data`` is always the sanitized snapshot of the draft; raw
    customer email and phone numbers never reach an entry.
    """
    timestamp: datetime
    event_type: AuditEventType
    session_id: str
    order_data: dict[str, Any]
    validation_errors: list[ValidationError]
    severity: AuditSeverity
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    additional_context: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation, the payload of critical alerts."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "user_id": self.user_id,
            "session_id": self.session_id,
            "order_data": self.order_data,
            "validation_errors": [error.to_dict() for error in self.validation_errors],
            "severity": self.severity.value,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "additional_context": self.additional_context,
        }


@dataclass
class AuditOutcome:
    """What happened to one audit call.

    Audit calls never raise; callers that care (tests, metrics) inspect this
    instead. ``recorded`` is False both when nothing needed recording and
    when the store failed; ``error`` tells the two apart. ``alerted`` means an
    alert was dispatched, not that it was delivered.
    """
    recorded: bool = False
    entry: Optional[AuditLogEntry] = None
    alerted: bool = False
    error: Optional[str] = None
