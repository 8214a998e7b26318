"""SQL repositories and port adapters."""

from .audit_log_repository import AuditLogRepository, AuditLogStats, SqlAuditLogStore
from .catalog_repository import (
    SqlAddressDirectory,
    SqlDiscountValidator,
    SqlProductCatalog,
    parse_uuid,
)
from .order_repository import CartRow, OrderRepository

__all__ = [
    "AuditLogRepository",
    "AuditLogStats",
    "SqlAuditLogStore",
    "SqlAddressDirectory",
    "SqlDiscountValidator",
    "SqlProductCatalog",
    "parse_uuid",
    "CartRow",
    "OrderRepository",
]
