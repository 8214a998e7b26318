"""Order audit logging service.

OrderAuditLogger records validation violations, warnings, suspicious
activity and blocked orders as immutable audit entries, masks customer PII
before anything is stored, and raises critical alerts.

Audit calls never raise. Storage failures are logged to the diagnostic log,
counted in metrics and reported through the returned AuditOutcome. Alerts
are delivered in background tasks; a failed delivery is logged and counted
but never reaches the caller.

Severity tiers (first matching tier wins):
- critical: PRODUCT_NOT_FOUND, CALCULATION_MISMATCH, CART_EMPTY, INVALID_USER_ID
- high: PRODUCT_OUT_OF_STOCK, INVALID_DISCOUNT_CODE, DISCOUNT_USAGE_EXCEEDED,
  MAXIMUM_ORDER_EXCEEDED
- medium: PRODUCT_PRICE_CHANGED, DISCOUNT_EXPIRED, MINIMUM_ORDER_NOT_MET,
  INVALID_QUANTITY
- low: everything else
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request

from ..domain.orders.draft import OrderDraft
from ..domain.validation.models import ValidationCode, ValidationError, ValidationSeverity
from ..observability.metrics import audit_entries_total, audit_write_failures_total, critical_alerts_total
from .alerts import LoggingAlertSink
from .models import AuditEventType, AuditLogEntry, AuditOutcome, AuditRequestContext, AuditSeverity
from .port import AuditLogStorePort, CriticalAlertPort
from .sanitize import sanitize_order_data

logger = logging.getLogger(__name__)

# In-flight alert deliveries; the event loop holds tasks only weakly
_pending_alerts: set[asyncio.Task] = set()

CRITICAL_CODES = frozenset({
    "PRODUCT_NOT_FOUND",
    "CALCULATION_MISMATCH",
    "CART_EMPTY",
    "INVALID_USER_ID",
})

HIGH_CODES = frozenset({
    "PRODUCT_OUT_OF_STOCK",
    "INVALID_DISCOUNT_CODE",
    "DISCOUNT_USAGE_EXCEEDED",
    "MAXIMUM_ORDER_EXCEEDED",
})

MEDIUM_CODES = frozenset({
    "PRODUCT_PRICE_CHANGED",
    "DISCOUNT_EXPIRED",
    "MINIMUM_ORDER_NOT_MET",
    "INVALID_QUANTITY",
})


def determine_severity(errors: list[ValidationError]) -> AuditSeverity:
    """Classify a set of violations into an audit severity tier."""
    codes = {error.code for error in errors}
    if codes & CRITICAL_CODES:
        return AuditSeverity.CRITICAL
    if codes & HIGH_CODES:
        return AuditSeverity.HIGH
    if codes & MEDIUM_CODES:
        return AuditSeverity.MEDIUM
    return AuditSeverity.LOW


def determine_event_type(errors: list[ValidationError]) -> AuditEventType:
    """validation_failure if any error, else validation_warning if any warning.

    An empty list is recorded as a failure.
    """
    if any(error.severity == ValidationSeverity.ERROR for error in errors):
        return AuditEventType.VALIDATION_FAILURE
    if any(error.severity == ValidationSeverity.WARNING for error in errors):
        return AuditEventType.VALIDATION_WARNING
    return AuditEventType.VALIDATION_FAILURE


def generate_session_id() -> str:
    """session_<epoch ms>_<9 random characters>"""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def client_info_from_request(request: Request) -> AuditRequestContext:
    """Extract client IP and User-Agent from a FastAPI request.

    The first address in X-Forwarded-For wins over the socket peer.
    """
    ip_address = request.client.host if request.client else None
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()

    return AuditRequestContext(
        ip_address=ip_address,
        user_agent=request.headers.get("User-Agent"),
    )


class OrderAuditLogger:
    """Audit logger for one checkout attempt.

    Construct one per attempt so every entry of the attempt shares the same
    session id.

    Example:
        audit = OrderAuditLogger(store, alerts, client_info_from_request(request))
        outcome = await audit.log_validation_violation(draft, result.errors)
    """

    def __init__(
        self,
        store: AuditLogStorePort,
        alerts: Optional[CriticalAlertPort] = None,
        request_context: Optional[AuditRequestContext] = None,
    ):
        self.store = store
        self.alerts = alerts or LoggingAlertSink()
        self.request_context = request_context or AuditRequestContext()
        self._session_id = generate_session_id()
        self._alert_tasks: set[asyncio.Task] = set()

    @property
    def session_id(self) -> str:
        return self._session_id

    async def log_validation_violation(
        self,
        draft: OrderDraft,
        errors: list[ValidationError],
        context: Optional[dict[str, Any]] = None,
    ) -> AuditOutcome:
        """Record validation violations; critical severity also raises an alert.

        Args:
            draft: The draft that failed validation
            errors: Errors and/or warnings from the validators
            context: Additional context stored with the entry

        Returns:
            AuditOutcome (never raises)
        """
        try:
            severity = determine_severity(errors)
            entry = self._build_entry(
                draft,
                event_type=determine_event_type(errors),
                errors=errors,
                severity=severity,
                context=context,
            )
        except Exception as e:
            return self._failed("validation violation", e)

        logger.warning(
            f"Order validation violation ({len(errors)} issues)",
            extra={
                "session_id": self.session_id,
                "user_id": entry.user_id,
                "event_type": entry.event_type.value,
                "severity": severity.value,
            },
        )
        return await self._record(entry, alert=severity == AuditSeverity.CRITICAL)

    async def log_validation_success(
        self,
        draft: OrderDraft,
        warnings: Optional[list[ValidationError]] = None,
    ) -> AuditOutcome:
        """Record the warnings of a successful validation (nothing if none)."""
        if not warnings:
            return AuditOutcome()

        try:
            entry = self._build_entry(
                draft,
                event_type=AuditEventType.VALIDATION_WARNING,
                errors=warnings,
                severity=AuditSeverity.LOW,
            )
        except Exception as e:
            return self._failed("validation success", e)

        return await self._record(entry, alert=False)

    async def log_suspicious_activity(
        self,
        description: str,
        draft: OrderDraft,
        context: Optional[dict[str, Any]] = None,
    ) -> AuditOutcome:
        """Record a suspicious pattern at high severity and always alert."""
        try:
            entry = self._build_entry(
                draft,
                event_type=AuditEventType.SUSPICIOUS_ACTIVITY,
                errors=[ValidationError.error("system", ValidationCode.SUSPICIOUS_ACTIVITY, description)],
                severity=AuditSeverity.HIGH,
                context=context,
            )
        except Exception as e:
            return self._failed("suspicious activity", e)

        logger.warning(
            f"Suspicious order activity: {description}",
            extra={"session_id": self.session_id, "user_id": entry.user_id},
        )
        return await self._record(entry, alert=True)

    async def log_order_blocked(
        self,
        draft: OrderDraft,
        reason: str,
        context: Optional[dict[str, Any]] = None,
    ) -> AuditOutcome:
        """Record a validated order that could not be placed."""
        try:
            entry = self._build_entry(
                draft,
                event_type=AuditEventType.ORDER_BLOCKED,
                errors=[ValidationError.error("general", ValidationCode.VALIDATION_ERROR, reason)],
                severity=AuditSeverity.HIGH,
                context=context,
            )
        except Exception as e:
            return self._failed("blocked order", e)

        return await self._record(entry, alert=False)

    def _build_entry(
        self,
        draft: OrderDraft,
        event_type: AuditEventType,
        errors: list[ValidationError],
        severity: AuditSeverity,
        context: Optional[dict[str, Any]] = None,
    ) -> AuditLogEntry:
        return AuditLogEntry(
            timestamp=datetime.now(timezone.utc),
            event_type=event_type,
            user_id=draft.user_id,
            session_id=self.session_id,
            order_data=sanitize_order_data(draft),
            validation_errors=list(errors),
            severity=severity,
            ip_address=self.request_context.ip_address,
            user_agent=self.request_context.user_agent,
            additional_context=context,
        )

    async def _record(self, entry: AuditLogEntry, alert: bool) -> AuditOutcome:
        outcome = AuditOutcome(entry=entry)

        try:
            await self.store.append(entry)
            outcome.recorded = True
            audit_entries_total.labels(
                event_type=entry.event_type.value,
                severity=entry.severity.value,
            ).inc()
        except Exception as e:
            audit_write_failures_total.labels(event_type=entry.event_type.value).inc()
            logger.error(
                f"Failed to store order audit log: {e}",
                exc_info=True,
                extra={"session_id": self.session_id, "event_type": entry.event_type.value},
            )
            outcome.error = str(e)

        if alert:
            self._dispatch_alert(entry)
            outcome.alerted = True

        return outcome

    def _dispatch_alert(self, entry: AuditLogEntry) -> None:
        """Deliver the alert in the background; the audit call returns at once."""
        task = asyncio.create_task(self._deliver_alert(entry))
        for pending in (_pending_alerts, self._alert_tasks):
            pending.add(task)
            task.add_done_callback(pending.discard)

    async def _deliver_alert(self, entry: AuditLogEntry) -> None:
        try:
            await self.alerts.send_alert(entry)
        except Exception as e:
            critical_alerts_total.labels(status="failed").inc()
            logger.error(
                f"Failed to send critical alert: {e}",
                exc_info=True,
                extra={"session_id": entry.session_id},
            )
            return

        critical_alerts_total.labels(status="sent").inc()

    async def wait_for_alerts(self) -> None:
        """Wait until every alert dispatched by this logger has been handled."""
        if self._alert_tasks:
            await asyncio.gather(*self._alert_tasks)

    def _failed(self, what: str, error: Exception) -> AuditOutcome:
        logger.error(
            f"Failed to log {what}: {error}",
            exc_info=True,
            extra={"session_id": self.session_id},
        )
        return AuditOutcome(error=str(error))


async def drain_pending_alerts() -> None:
    """Wait for alerts still in flight from any logger (application shutdown)."""
    if _pending_alerts:
        await asyncio.gather(*_pending_alerts)
