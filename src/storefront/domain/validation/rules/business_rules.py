"""Business rules that need no external data.

Safe to run anywhere (including before any database round-trip): pure,
synchronous and deterministic for a given draft and context. Every check
runs; nothing short-circuits.
"""

import re
from typing import Optional

from ...orders.draft import AuthenticatedOrderDraft, DraftKind, GuestOrderDraft, OrderDraft
from ..models import ValidationCode, ValidationContext, ValidationError, ValidationResult

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_business_rules(
    draft: OrderDraft,
    context: Optional[ValidationContext] = None,
) -> ValidationResult:
    """Validate a draft against the client-side business rules.

    Rules implemented, in order:
    - CART_EMPTY: cart must contain at least one item
    - INVALID_QUANTITY / LARGE_QUANTITY: per item, quantity > 0 (error) and
      not above the per-item maximum (warning)
    - INVALID_TOTAL: total must be greater than 0
    - MISSING_DELIVERY_METHOD: delivery method must be chosen
    - Guest drafts: contact and address fields, email format
    - Authenticated drafts: user id and address id

    Args:
        draft: Guest or authenticated order draft
        context: Validation context (thresholds); defaults are used when None

    Returns:
        ValidationResult; warnings never make it invalid
    """
    context = context or ValidationContext()
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    if not draft.cart_items:
        errors.append(ValidationError.error(
            "cartItems", ValidationCode.CART_EMPTY, "Cart cannot be empty"
        ))

    for index, item in enumerate(draft.cart_items):
        field_name = f"cartItems[{index}].quantity"
        if item.quantity <= 0:
            errors.append(ValidationError.error(
                field_name, ValidationCode.INVALID_QUANTITY, "Quantity must be greater than 0"
            ))
        if item.quantity > context.max_quantity_per_item:
            warnings.append(ValidationError.warning(
                field_name, ValidationCode.LARGE_QUANTITY, "Large quantity order - please verify"
            ))

    if draft.total <= 0:
        errors.append(ValidationError.error(
            "total", ValidationCode.INVALID_TOTAL, "Order total must be greater than 0"
        ))

    if _blank(draft.delivery_method):
        errors.append(ValidationError.error(
            "deliveryMethod", ValidationCode.MISSING_DELIVERY_METHOD, "Delivery method is required"
        ))

    if draft.kind == DraftKind.GUEST:
        errors.extend(_validate_guest_details(draft))
    elif draft.kind == DraftKind.AUTHENTICATED:
        errors.extend(_validate_account_references(draft))

    return ValidationResult(errors=errors, warnings=warnings)


def _validate_guest_details(draft: GuestOrderDraft) -> list[ValidationError]:
    errors = []
    customer = draft.customer_info
    address = draft.address

    if _blank(customer.full_name):
        errors.append(ValidationError.error(
            "customerInfo.full_name", ValidationCode.MISSING_NAME, "Full name is required"
        ))

    if _blank(customer.email):
        errors.append(ValidationError.error(
            "customerInfo.email", ValidationCode.MISSING_EMAIL, "Email is required"
        ))
    elif not EMAIL_PATTERN.match(customer.email):
        errors.append(ValidationError.error(
            "customerInfo.email", ValidationCode.INVALID_EMAIL, "Invalid email format"
        ))

    if _blank(customer.phone):
        errors.append(ValidationError.error(
            "customerInfo.phone", ValidationCode.MISSING_PHONE, "Phone number is required"
        ))

    required_address_fields = [
        ("street_address", ValidationCode.MISSING_ADDRESS, "Street address is required"),
        ("city", ValidationCode.MISSING_CITY, "City is required"),
        ("province", ValidationCode.MISSING_PROVINCE, "Province is required"),
        ("postal_code", ValidationCode.MISSING_POSTAL_CODE, "Postal code is required"),
    ]
    for attribute, code, message in required_address_fields:
        if _blank(getattr(address, attribute)):
            errors.append(ValidationError.error(f"address.{attribute}", code, message))

    return errors


def _validate_account_references(draft: AuthenticatedOrderDraft) -> list[ValidationError]:
    errors = []
    if _blank(draft.user_id):
        errors.append(ValidationError.error(
            "userId", ValidationCode.MISSING_USER_ID, "User ID is required"
        ))
    if _blank(draft.address_id):
        errors.append(ValidationError.error(
            "addressId", ValidationCode.MISSING_ADDRESS_ID, "Address ID is required"
        ))
    return errors
