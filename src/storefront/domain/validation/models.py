"""Validation models and enums.

ValidationError is the shared record for a single rule violation. It is the
domain model (not the database model): audit rows store its dict form.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class ValidationSeverity(str, Enum):
    """Severity of a single violation. Warnings never invalidate an order."""
    ERROR = "error"
    WARNING = "warning"


class ValidationCode(str, Enum):
    """Stable codes for every rule violation the validators emit."""
    # Business rules (no external data)
    CART_EMPTY = "CART_EMPTY"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    LARGE_QUANTITY = "LARGE_QUANTITY"
    INVALID_TOTAL = "INVALID_TOTAL"
    MISSING_DELIVERY_METHOD = "MISSING_DELIVERY_METHOD"
    MISSING_NAME = "MISSING_NAME"
    MISSING_EMAIL = "MISSING_EMAIL"
    INVALID_EMAIL = "INVALID_EMAIL"
    MISSING_PHONE = "MISSING_PHONE"
    MISSING_ADDRESS = "MISSING_ADDRESS"
    MISSING_CITY = "MISSING_CITY"
    MISSING_PROVINCE = "MISSING_PROVINCE"
    MISSING_POSTAL_CODE = "MISSING_POSTAL_CODE"
    MISSING_USER_ID = "MISSING_USER_ID"
    MISSING_ADDRESS_ID = "MISSING_ADDRESS_ID"

    # Order limits
    MINIMUM_ORDER_NOT_MET = "MINIMUM_ORDER_NOT_MET"
    MAXIMUM_ORDER_EXCEEDED = "MAXIMUM_ORDER_EXCEEDED"

    # Database constraints
    INVALID_DELIVERY_METHOD = "INVALID_DELIVERY_METHOD"
    EMPTY_CART = "EMPTY_CART"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    PRICE_CHANGED = "PRICE_CHANGED"
    GUEST_NAME_REQUIRED = "GUEST_NAME_REQUIRED"
    GUEST_EMAIL_REQUIRED = "GUEST_EMAIL_REQUIRED"
    GUEST_PHONE_REQUIRED = "GUEST_PHONE_REQUIRED"
    INVALID_EMAIL_FORMAT = "INVALID_EMAIL_FORMAT"
    ADDRESS_REQUIRED = "ADDRESS_REQUIRED"
    CITY_REQUIRED = "CITY_REQUIRED"
    PROVINCE_REQUIRED = "PROVINCE_REQUIRED"
    POSTAL_CODE_REQUIRED = "POSTAL_CODE_REQUIRED"
    INVALID_USER = "INVALID_USER"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    INVALID_DISCOUNT = "INVALID_DISCOUNT"
    INVALID_DELIVERY_FEE = "INVALID_DELIVERY_FEE"
    TOTAL_CALCULATION_ERROR = "TOTAL_CALCULATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Audit
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"


@dataclass(frozen=True)
class ValidationError:
    """A single rule violation: field, human message, stable code, severity."""
    field: str
    message: str
    code: str
    severity: ValidationSeverity = ValidationSeverity.ERROR

    @classmethod
    def error(cls, field: str, code: ValidationCode, message: str) -> "ValidationError":
        return cls(field=field, message=message, code=code.value, severity=ValidationSeverity.ERROR)

    @classmethod
    def warning(cls, field: str, code: ValidationCode, message: str) -> "ValidationError":
        return cls(field=field, message=message, code=code.value, severity=ValidationSeverity.WARNING)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON storage and API responses"""
        return {
            "field": self.field,
            "message": self.message,
            "code": self.code,
            "severity": self.severity.value,
        }


@dataclass
class ValidationResult:
    """Outcome of a validator run.

    ``is_valid`` is derived from ``errors`` so the two can never disagree.
    """
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def error_codes(self) -> list[str]:
        return [error.code for error in self.errors]

    @property
    def warning_codes(self) -> list[str]:
        return [warning.code for warning in self.warnings]

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Union of two results. Overlapping checks stay duplicated."""
        return ValidationResult(
            errors=[*self.errors, *other.errors],
            warnings=[*self.warnings, *other.warnings],
        )


@dataclass
class ValidationContext:
    """Context object passed to the validators.

    Carries the calling identity (for ownership checks) and the configured
    thresholds so the rule functions stay free of global settings.
    """
    current_user_id: Optional[str] = None
    allowed_delivery_methods: frozenset[str] = frozenset({"standard", "express", "collection"})
    max_quantity_per_item: int = 10
    min_order_value: Decimal = Decimal("50")
    max_order_value: Decimal = Decimal("10000")
    price_tolerance: Decimal = Decimal("0.01")

    @classmethod
    def from_settings(cls, settings: Any, current_user_id: Optional[str] = None) -> "ValidationContext":
        """Build a context from application settings."""
        return cls(
            current_user_id=current_user_id,
            allowed_delivery_methods=frozenset(settings.SERVER_DELIVERY_METHODS),
            max_quantity_per_item=settings.MAX_QUANTITY_PER_ITEM,
            min_order_value=settings.MIN_ORDER_VALUE,
            max_order_value=settings.MAX_ORDER_VALUE,
            price_tolerance=settings.PRICE_TOLERANCE,
        )
