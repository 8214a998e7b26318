"""Unit tests for correlated JSON logging"""

import json
import logging
import sys

from storefront.observability.correlation import (
    audit_session_var,
    bind_audit_session,
    bind_request_id,
    current_request_id,
    request_id_var,
)
from storefront.observability.logging_config import CorrelationFilter, JSONFormatter


def _record(message="Order created", **extra):
    record = logging.LogRecord("storefront.checkout", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationFilter:

    def test_stamps_bound_ids(self):
        request_token = bind_request_id("req-42")
        session_token = bind_audit_session("session_abc")
        try:
            record = _record()
            CorrelationFilter().filter(record)
        finally:
            request_id_var.reset(request_token)
            audit_session_var.reset(session_token)

        assert record.request_id == "req-42"
        assert record.session_id == "session_abc"

    def test_explicit_session_id_wins(self):
        token = bind_audit_session("session_bound")
        try:
            record = _record(session_id="session_explicit")
            CorrelationFilter().filter(record)
        finally:
            audit_session_var.reset(token)

        assert record.session_id == "session_explicit"

    def test_outside_a_request(self):
        record = _record()
        CorrelationFilter().filter(record)

        assert current_request_id() == "no-request-id"
        assert record.request_id == "no-request-id"
        assert record.session_id == "-"


class TestJSONFormatter:

    def test_includes_order_context(self):
        record = _record(request_id="req-1", session_id="session_1", order_number="ORD-20261019-0001", severity="high")

        document = json.loads(JSONFormatter().format(record))

        assert document["message"] == "Order created"
        assert document["request_id"] == "req-1"
        assert document["session_id"] == "session_1"
        assert document["order_number"] == "ORD-20261019-0001"
        assert document["severity"] == "high"
        assert "user_id" not in document

    def test_placeholder_session_is_omitted(self):
        record = _record(request_id="req-1", session_id="-")

        document = json.loads(JSONFormatter().format(record))

        assert "session_id" not in document

    def test_exception_details(self):
        try:
            raise RuntimeError("audit database unavailable")
        except RuntimeError:
            record = _record(request_id="req-1")
            record.exc_info = sys.exc_info()

        document = json.loads(JSONFormatter().format(record))

        assert "audit database unavailable" in document["error"]
        assert "Traceback" in document["traceback"]
