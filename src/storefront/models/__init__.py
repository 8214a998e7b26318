"""SQLAlchemy models for the storefront"""

from .base import Base, PortableJSONB
from .order import CartItem, Order, OrderItem
from .order_audit_log import AuditLogImmutableError, OrderAuditLog, audit_correction
from .product import Product
from .profile import Address, Profile

__all__ = [
    "Base",
    "PortableJSONB",
    "Product",
    "Profile",
    "Address",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderAuditLog",
    "AuditLogImmutableError",
    "audit_correction",
]
