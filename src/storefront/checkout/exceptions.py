"""Checkout exceptions, mapped to HTTP responses in main.py."""

from typing import Optional

from ..domain.validation.models import ValidationResult


class CheckoutError(Exception):
    """Base class for checkout failures."""
    pass


class OrderValidationFailed(CheckoutError):
    """The draft failed validation; no order was created (HTTP 422)."""

    def __init__(self, result: ValidationResult, message: Optional[str] = None):
        self.result = result
        super().__init__(message or f"Order validation failed with {len(result.errors)} errors")


class OrderPersistenceError(CheckoutError):
    """A validated order could not be stored (HTTP 503)."""

    def __init__(self, order_number: str, message: str = "Failed to create order"):
        self.order_number = order_number
        super().__init__(message)
