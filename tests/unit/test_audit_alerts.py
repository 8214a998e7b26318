"""Unit tests for the critical alert sinks"""

import json
import logging
from datetime import datetime, timezone

import httpx
import pytest

from storefront.audit.alerts import (
    AlertDeliveryError,
    LoggingAlertSink,
    WebhookAlertSink,
    build_alert_sink,
    describe_violations,
)
from storefront.audit.models import AuditEventType, AuditLogEntry, AuditSeverity
from storefront.config import Settings
from storefront.observability.logging_config import JSONFormatter
from storefront.domain.validation.models import ValidationCode, ValidationError


@pytest.fixture
def entry() -> AuditLogEntry:
    return AuditLogEntry(
        timestamp=datetime(2026, 1, 4, 12, 0, tzinfo=timezone.utc),
        event_type=AuditEventType.VALIDATION_FAILURE,
        session_id="session_1767528000000_abc123def",
        order_data={"kind": "guest"},
        validation_errors=[
            ValidationError.error("cartItems", ValidationCode.CART_EMPTY, "Cart cannot be empty"),
        ],
        severity=AuditSeverity.CRITICAL,
    )


class TestWebhookAlertSink:

    async def test_posts_alert_payload(self, entry):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"ok": True})

        sink = WebhookAlertSink("https://hooks.example.com/orders", transport=httpx.MockTransport(handler))

        await sink.send_alert(entry)

        assert len(requests) == 1
        assert requests[0].method == "POST"
        assert str(requests[0].url) == "https://hooks.example.com/orders"
        body = json.loads(requests[0].content)
        assert body["alert"]["severity"] == "critical"
        assert body["alert"]["session_id"] == "session_1767528000000_abc123def"
        assert body["alert"]["validation_errors"][0]["code"] == "CART_EMPTY"
        assert body["alert"]["order_data"] == {"kind": "guest"}

    async def test_error_status_raises_delivery_error(self, entry):
        sink = WebhookAlertSink(
            "https://hooks.example.com/orders",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

        with pytest.raises(AlertDeliveryError):
            await sink.send_alert(entry)

    async def test_connection_failure_raises_delivery_error(self, entry):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sink = WebhookAlertSink("https://hooks.example.com/orders", transport=httpx.MockTransport(handler))

        with pytest.raises(AlertDeliveryError):
            await sink.send_alert(entry)


class TestLoggingAlertSink:

    async def test_logs_at_error_level(self, entry, caplog):
        with caplog.at_level(logging.ERROR, logger="storefront.audit.alerts"):
            await LoggingAlertSink().send_alert(entry)

        assert "CRITICAL ORDER VALIDATION VIOLATION" in caplog.text
        assert caplog.records[0].session_id == entry.session_id

    async def test_formatted_line_names_the_violations(self, entry, caplog):
        with caplog.at_level(logging.ERROR, logger="storefront.audit.alerts"):
            await LoggingAlertSink().send_alert(entry)

        document = json.loads(JSONFormatter().format(caplog.records[0]))

        assert document["message"] == (
            "CRITICAL ORDER VALIDATION VIOLATION: validation_failure (critical): "
            "CART_EMPTY cartItems: Cart cannot be empty"
        )
        assert document["alert"]["validation_errors"][0]["code"] == "CART_EMPTY"
        assert document["alert"]["order_data"] == {"kind": "guest"}
        assert document["severity"] == "critical"

    def test_describe_without_issues(self, entry):
        entry.validation_errors = []

        assert describe_violations(entry) == "validation_failure (critical): no issues"


class TestBuildAlertSink:

    def test_webhook_when_configured(self):
        sink = build_alert_sink(Settings(ALERT_WEBHOOK_URL="https://hooks.example.com/orders"))

        assert isinstance(sink, WebhookAlertSink)
        assert sink.webhook_url == "https://hooks.example.com/orders"

    def test_logging_sink_by_default(self):
        assert isinstance(build_alert_sink(Settings(ALERT_WEBHOOK_URL=None)), LoggingAlertSink)
