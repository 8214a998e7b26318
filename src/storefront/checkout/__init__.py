"""Checkout orchestration, manual-payment messaging and endpoints."""

from .exceptions import CheckoutError, OrderPersistenceError, OrderValidationFailed
from .service import CheckoutResult, CheckoutService

__all__ = [
    "CheckoutError",
    "OrderPersistenceError",
    "OrderValidationFailed",
    "CheckoutResult",
    "CheckoutService",
]
