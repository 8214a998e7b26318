"""Server-side constraint validation against authoritative data.

Checks that need the catalog, the address book, the calling identity or the
discount procedure. Infrastructure failures are caught here and reported as
a single VALIDATION_ERROR; they are never raised to the caller.
"""

import logging
import re
from decimal import Decimal

from ..orders.draft import AuthenticatedOrderDraft, DraftKind, GuestOrderDraft, OrderDraft
from .models import ValidationCode, ValidationContext, ValidationError, ValidationResult
from .port import AddressDirectoryPort, DiscountValidatorPort, ProductCatalogPort

logger = logging.getLogger(__name__)

LOOSE_EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


def _blank(value) -> bool:
    return not value or not str(value).strip()


class ConstraintValidator:
    """Validates a draft against database constraints.

    Example:
        validator = ConstraintValidator(catalog, addresses, discounts)
        result = await validator.validate_database_constraints(draft, context)
    """

    def __init__(
        self,
        catalog: ProductCatalogPort,
        addresses: AddressDirectoryPort,
        discounts: DiscountValidatorPort,
    ):
        self.catalog = catalog
        self.addresses = addresses
        self.discounts = discounts

    async def validate_database_constraints(
        self,
        draft: OrderDraft,
        context: ValidationContext,
    ) -> ValidationResult:
        """Run all database-backed checks for a draft.

        Checks run in order: delivery method, cart lines against the catalog,
        guest contact/address fields or account ownership, discount code,
        monetary amounts and the total calculation. Errors gathered before an
        unexpected exception are kept and one VALIDATION_ERROR is appended.

        Args:
            draft: Guest or authenticated order draft
            context: Calling identity and configured thresholds

        Returns:
            ValidationResult (never raises)
        """
        errors: list[ValidationError] = []
        warnings: list[ValidationError] = []

        try:
            errors.extend(self._check_delivery_method(draft, context))
            await self._check_cart_lines(draft, context, errors, warnings)

            if draft.kind == DraftKind.GUEST:
                errors.extend(self._check_guest_fields(draft))
            elif draft.kind == DraftKind.AUTHENTICATED:
                errors.extend(await self._check_account_ownership(draft, context))

            if draft.discount_code:
                errors.extend(await self._check_discount(draft))

            errors.extend(self._check_amounts(draft, context))

        except Exception as e:
            logger.error(f"Order validation error: {e}", exc_info=True)
            errors.append(ValidationError.error(
                "general",
                ValidationCode.VALIDATION_ERROR,
                "An error occurred during validation. Please try again.",
            ))

        return ValidationResult(errors=errors, warnings=warnings)

    def _check_delivery_method(self, draft: OrderDraft, context: ValidationContext) -> list[ValidationError]:
        if draft.delivery_method in context.allowed_delivery_methods:
            return []
        allowed = ", ".join(sorted(context.allowed_delivery_methods))
        return [ValidationError.error(
            "deliveryMethod",
            ValidationCode.INVALID_DELIVERY_METHOD,
            f"Invalid delivery method. Must be one of: {allowed}",
        )]

    async def _check_cart_lines(
        self,
        draft: OrderDraft,
        context: ValidationContext,
        errors: list[ValidationError],
        warnings: list[ValidationError],
    ) -> None:
        if not draft.cart_items:
            errors.append(ValidationError.error(
                "cartItems", ValidationCode.EMPTY_CART, "Order must contain at least one item"
            ))
            return

        for item in draft.cart_items:
            product = await self.catalog.get_product(item.product_id)

            if product is None:
                errors.append(ValidationError.error(
                    "cartItems",
                    ValidationCode.PRODUCT_NOT_FOUND,
                    f"Product with ID {item.product_id} not found",
                ))
                continue

            if not product.is_available:
                errors.append(ValidationError.error(
                    "cartItems",
                    ValidationCode.PRODUCT_UNAVAILABLE,
                    f'Product "{product.name}" is not available',
                ))

            if product.stock_quantity is not None and product.stock_quantity < item.quantity:
                errors.append(ValidationError.error(
                    "cartItems",
                    ValidationCode.INSUFFICIENT_STOCK,
                    f'Insufficient stock for "{product.name}". '
                    f"Available: {product.stock_quantity}, Requested: {item.quantity}",
                ))

            if abs(Decimal(product.price) - Decimal(item.price)) > context.price_tolerance:
                warnings.append(ValidationError.warning(
                    "cartItems",
                    ValidationCode.PRICE_CHANGED,
                    f'Price for "{product.name}" has changed. '
                    f"Current: R{product.price}, Cart: R{item.price}",
                ))

            if item.quantity <= 0:
                errors.append(ValidationError.error(
                    "cartItems",
                    ValidationCode.INVALID_QUANTITY,
                    f'Invalid quantity for "{product.name}". Must be greater than 0',
                ))

    def _check_guest_fields(self, draft: GuestOrderDraft) -> list[ValidationError]:
        errors = []
        customer = draft.customer_info
        address = draft.address

        if _blank(customer.full_name):
            errors.append(ValidationError.error(
                "customerInfo.full_name",
                ValidationCode.GUEST_NAME_REQUIRED,
                "Full name is required for guest orders",
            ))

        if _blank(customer.email):
            errors.append(ValidationError.error(
                "customerInfo.email",
                ValidationCode.GUEST_EMAIL_REQUIRED,
                "Email is required for guest orders",
            ))
        elif not LOOSE_EMAIL_PATTERN.search(customer.email):
            errors.append(ValidationError.error(
                "customerInfo.email",
                ValidationCode.INVALID_EMAIL_FORMAT,
                "Please enter a valid email address",
            ))

        if _blank(customer.phone):
            errors.append(ValidationError.error(
                "customerInfo.phone",
                ValidationCode.GUEST_PHONE_REQUIRED,
                "Phone number is required for guest orders",
            ))

        required_address_fields = [
            ("street_address", ValidationCode.ADDRESS_REQUIRED, "Street address is required"),
            ("city", ValidationCode.CITY_REQUIRED, "City is required"),
            ("province", ValidationCode.PROVINCE_REQUIRED, "Province is required"),
            ("postal_code", ValidationCode.POSTAL_CODE_REQUIRED, "Postal code is required"),
        ]
        for attribute, code, message in required_address_fields:
            if _blank(getattr(address, attribute)):
                errors.append(ValidationError.error(f"address.{attribute}", code, message))

        return errors

    async def _check_account_ownership(
        self,
        draft: AuthenticatedOrderDraft,
        context: ValidationContext,
    ) -> list[ValidationError]:
        errors = []

        if not context.current_user_id or context.current_user_id != draft.user_id:
            errors.append(ValidationError.error(
                "userId", ValidationCode.INVALID_USER, "Invalid user authentication"
            ))

        owned = await self.addresses.address_belongs_to(draft.address_id, draft.user_id)
        if not owned:
            errors.append(ValidationError.error(
                "addressId", ValidationCode.INVALID_ADDRESS, "Invalid delivery address"
            ))

        return errors

    async def _check_discount(self, draft: OrderDraft) -> list[ValidationError]:
        outcome = await self.discounts.validate(draft.discount_code, draft.user_id, draft.subtotal)
        if outcome.is_valid:
            return []
        return [ValidationError.error(
            "discountCode",
            ValidationCode.INVALID_DISCOUNT,
            outcome.error or "Invalid discount code",
        )]

    def _check_amounts(self, draft: OrderDraft, context: ValidationContext) -> list[ValidationError]:
        errors = []

        if draft.total <= 0:
            errors.append(ValidationError.error(
                "total", ValidationCode.INVALID_TOTAL, "Order total must be greater than 0"
            ))

        if draft.delivery_fee < 0:
            errors.append(ValidationError.error(
                "deliveryFee", ValidationCode.INVALID_DELIVERY_FEE, "Delivery fee cannot be negative"
            ))

        expected_total = draft.expected_total
        if abs(draft.total - expected_total) > context.price_tolerance:
            errors.append(ValidationError.error(
                "total",
                ValidationCode.TOTAL_CALCULATION_ERROR,
                f"Order total calculation error. Expected: R{expected_total:.2f}, "
                f"Received: R{draft.total:.2f}",
            ))

        return errors
