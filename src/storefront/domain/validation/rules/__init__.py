"""Validation rules implementations.

Each rule module contains discrete synchronous validation functions that
return a ValidationResult for the draft they inspect.
"""

from .business_rules import validate_business_rules
from .order_limit_rules import validate_order_limits

__all__ = [
    "validate_business_rules",
    "validate_order_limits",
]
