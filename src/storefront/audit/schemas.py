"""Pydantic schemas for order audit log endpoints.

Audit logs are read-only through the API (no create/update/delete).
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class OrderAuditLogResponse(BaseModel):
    """One order audit log entry. Order data is the sanitized snapshot."""
    id: UUID = Field(..., description="Audit log entry unique identifier")
    timestamp: datetime = Field(..., description="Event timestamp")
    event_type: str = Field(..., description="validation_failure, validation_warning, order_blocked or suspicious_activity")
    user_id: Optional[str] = Field(None, description="Customer ID (None for guest checkouts)")
    session_id: str = Field(..., description="Checkout attempt identifier")
    order_data: dict[str, Any] = Field(..., description="Sanitized order snapshot")
    validation_errors: list[dict[str, Any]] = Field(..., description="Violations with field, message, code and severity")
    severity: str = Field(..., description="low, medium, high or critical")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client User-Agent header")
    additional_context: Optional[dict[str, Any]] = Field(None, description="Additional context as JSON")
    created_at: datetime = Field(..., description="Row creation time")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "timestamp": "2026-01-04T12:00:00Z",
                "event_type": "validation_failure",
                "user_id": None,
                "session_id": "session_1767528000000_k3j9x2m1q",
                "order_data": {"kind": "guest", "customer_info": {"email": "ja**@example.com"}},
                "validation_errors": [
                    {"field": "cartItems", "message": "Cart cannot be empty", "code": "CART_EMPTY", "severity": "error"}
                ],
                "severity": "critical",
                "ip_address": "192.168.1.100",
                "user_agent": "Mozilla/5.0...",
                "additional_context": {"checkout_type": "guest"},
                "created_at": "2026-01-04T12:00:00Z"
            }
        }


class OrderAuditLogListResponse(BaseModel):
    """Paginated audit log query result."""
    entries: list[OrderAuditLogResponse] = Field(..., description="List of audit log entries")
    total: int = Field(..., description="Total number of entries matching filters")
    page: int = Field(..., description="Current page number")
    per_page: int = Field(..., description="Entries per page")


class OrderAuditLogStatsResponse(BaseModel):
    """Audit statistics over a time window."""
    start_date: datetime
    end_date: datetime
    total_violations: int
    critical_violations: int
    high_violations: int
    medium_violations: int
    low_violations: int
    unique_users: int
    unique_sessions: int
    most_common_error: Optional[str] = None
