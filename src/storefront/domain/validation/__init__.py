"""Order validation domain module.

Business rules, order limits and database constraint checks for checkout
drafts, combined by the composite OrderValidationEngine.
"""

from .constraints import ConstraintValidator
from .engine import OrderValidationEngine
from .messages import actionable_message, format_validation_errors, group_errors_by_field
from .models import (
    ValidationCode,
    ValidationContext,
    ValidationError,
    ValidationResult,
    ValidationSeverity,
)
from .port import (
    AddressDirectoryPort,
    DiscountValidation,
    DiscountValidatorPort,
    OrderValidatorPort,
    ProductCatalogPort,
    ProductSnapshot,
)
from .rules import validate_business_rules, validate_order_limits

__all__ = [
    "ValidationCode",
    "ValidationContext",
    "ValidationError",
    "ValidationResult",
    "ValidationSeverity",
    "AddressDirectoryPort",
    "DiscountValidation",
    "DiscountValidatorPort",
    "OrderValidatorPort",
    "ProductCatalogPort",
    "ProductSnapshot",
    "ConstraintValidator",
    "OrderValidationEngine",
    "validate_business_rules",
    "validate_order_limits",
    "actionable_message",
    "format_validation_errors",
    "group_errors_by_field",
]
