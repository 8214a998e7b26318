"""Order audit trail: severity classification, PII masking, persistence and alerts."""

from .alerts import AlertDeliveryError, LoggingAlertSink, WebhookAlertSink, build_alert_sink
from .models import AuditEventType, AuditLogEntry, AuditOutcome, AuditRequestContext, AuditSeverity
from .port import AuditLogStorePort, CriticalAlertPort
from .sanitize import mask_email, mask_phone, sanitize_order_data
from .service import OrderAuditLogger, determine_event_type, determine_severity

__all__ = [
    "AlertDeliveryError",
    "LoggingAlertSink",
    "WebhookAlertSink",
    "build_alert_sink",
    "AuditEventType",
    "AuditLogEntry",
    "AuditOutcome",
    "AuditRequestContext",
    "AuditSeverity",
    "AuditLogStorePort",
    "CriticalAlertPort",
    "mask_email",
    "mask_phone",
    "sanitize_order_data",
    "OrderAuditLogger",
    "determine_event_type",
    "determine_severity",
]
