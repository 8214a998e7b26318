"""Observability module.

JSON logging correlated by request and checkout session, Prometheus metrics
and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    audit_entries_total,
    audit_write_failures_total,
    critical_alerts_total,
    order_validations_total,
    orders_created_total,
    validation_issues_total,
)
from .correlation import (
    bind_audit_session,
    bind_request_id,
    current_audit_session,
    current_request_id,
    new_request_id,
    request_id_var,
)
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "audit_entries_total",
    "audit_write_failures_total",
    "critical_alerts_total",
    "order_validations_total",
    "orders_created_total",
    "validation_issues_total",
    # Correlation
    "bind_audit_session",
    "bind_request_id",
    "current_audit_session",
    "current_request_id",
    "new_request_id",
    "request_id_var",
    # Middleware
    "RequestIDMiddleware",
]
