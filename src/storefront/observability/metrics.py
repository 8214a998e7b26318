"""Prometheus metrics for the storefront backend.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter

# Validation metrics
order_validations_total = Counter(
    "storefront_order_validations_total",
    "Total composite order validations",
    ["draft_kind", "result"]  # draft_kind: guest|authenticated, result: valid|invalid
)

validation_issues_total = Counter(
    "storefront_validation_issues_total",
    "Total validation issues detected",
    ["code", "severity"]  # severity: error|warning
)

# Audit metrics
audit_entries_total = Counter(
    "storefront_audit_entries_total",
    "Total order audit log entries written",
    ["event_type", "severity"]
)

audit_write_failures_total = Counter(
    "storefront_audit_write_failures_total",
    "Audit log entries that could not be persisted",
    ["event_type"]
)

critical_alerts_total = Counter(
    "storefront_critical_alerts_total",
    "Critical audit alerts dispatched",
    ["status"]  # status: sent|failed
)

# Checkout metrics
orders_created_total = Counter(
    "storefront_orders_created_total",
    "Orders created by checkout",
    ["checkout_type"]  # checkout_type: guest|authenticated
)
