"""Critical alert sinks for the order audit trail.

Alerts are a best-effort side channel. Sinks may raise on delivery failure;
OrderAuditLogger catches and logs it so the checkout flow is never affected.
"""

import logging
from typing import Optional

import httpx

from .models import AuditLogEntry
from .port import CriticalAlertPort

logger = logging.getLogger(__name__)


class AlertDeliveryError(Exception):
    """Raised when an alert could not be delivered."""
    pass


def describe_violations(entry: AuditLogEntry) -> str:
    """One-line summary: "<event type> (<severity>): CODE field: message; ..."."""
    issues = "; ".join(
        f"{error.code} {error.field}: {error.message}" for error in entry.validation_errors
    )
    return f"{entry.event_type.value} ({entry.severity.value}): {issues or 'no issues'}"


class LoggingAlertSink(CriticalAlertPort):
    """Writes alerts to the diagnostic log at ERROR level (default sink).

    The violated codes are part of the message; the full entry (masked order
    data included) goes out as the ``alert`` field.
    """

    async def send_alert(self, entry: AuditLogEntry) -> None:
        logger.error(
            f"CRITICAL ORDER VALIDATION VIOLATION: {describe_violations(entry)}",
            extra={
                "session_id": entry.session_id,
                "user_id": entry.user_id,
                "event_type": entry.event_type.value,
                "severity": entry.severity.value,
                "alert": entry.to_dict(),
            },
        )


class WebhookAlertSink(CriticalAlertPort):
    """POST alerts as JSON to a monitoring webhook.

    Example:
        sink = WebhookAlertSink("https://hooks.example.com/orders", timeout=5.0)
        await sink.send_alert(entry)
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.transport = transport

    async def send_alert(self, entry: AuditLogEntry) -> None:
        """Send alert to the webhook.

        Raises:
            AlertDeliveryError: If the request fails or returns an error status
        """
        payload = {
            "text": f"Critical order validation violation ({entry.severity.value})",
            "alert": entry.to_dict(),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise AlertDeliveryError(f"Failed to send critical alert: {exc}") from exc

        logger.info(
            "Critical alert sent",
            extra={"session_id": entry.session_id, "severity": entry.severity.value},
        )


def build_alert_sink(settings) -> CriticalAlertPort:
    """Webhook sink when ALERT_WEBHOOK_URL is configured, logging sink otherwise."""
    if settings.ALERT_WEBHOOK_URL:
        return WebhookAlertSink(settings.ALERT_WEBHOOK_URL, timeout=settings.ALERT_TIMEOUT_SECONDS)
    return LoggingAlertSink()
