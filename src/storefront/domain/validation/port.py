"""Port interfaces for order validation (hexagonal architecture).

The constraint validator only ever talks to these ports; the SQL adapters
live in ``storefront.infrastructure.repositories``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..orders.draft import OrderDraft
from .models import ValidationContext, ValidationResult


@dataclass(frozen=True)
class ProductSnapshot:
    """Authoritative product data used to check a cart line."""
    id: str
    name: str
    price: Decimal
    is_available: bool
    stock_quantity: Optional[int] = None  # None: stock is not tracked


@dataclass(frozen=True)
class DiscountValidation:
    """Response of the discount-validation procedure."""
    is_valid: bool
    error: Optional[str] = None
    discount_amount: Optional[Decimal] = None


class ProductCatalogPort(ABC):
    """Product lookup by id."""

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[ProductSnapshot]:
        """Return the product or None if it does not exist."""
        pass


class AddressDirectoryPort(ABC):
    """Saved-address ownership lookup."""

    @abstractmethod
    async def address_belongs_to(self, address_id: str, user_id: str) -> bool:
        pass


class DiscountValidatorPort(ABC):
    """Remote discount-code validation."""

    @abstractmethod
    async def validate(
        self,
        code: str,
        user_id: Optional[str],
        order_total: Decimal,
    ) -> DiscountValidation:
        """Validate a discount code for a user and order subtotal.

        Implementations report failures as ``DiscountValidation(is_valid=False)``
        rather than raising.
        """
        pass


class OrderValidatorPort(ABC):
    """Port interface for the composite order validator."""

    @abstractmethod
    async def validate_order(self, draft: OrderDraft, context: ValidationContext) -> ValidationResult:
        """Validate a draft against business rules and database constraints.

        Args:
            draft: The guest or authenticated order draft
            context: Calling identity and configured thresholds

        Returns:
            ValidationResult with merged errors and warnings
        """
        pass
