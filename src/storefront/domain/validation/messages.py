"""User-facing formatting of validation errors.

The end user sees remediation text per error code rather than the raw
internal code. Codes without an entry fall back to the error's own message.
"""

from .models import ValidationError

REMEDIATION_MESSAGES = {
    "PRODUCT_OUT_OF_STOCK": "Please remove out-of-stock items from your cart or reduce quantities.",
    "INSUFFICIENT_STOCK": "Please remove out-of-stock items from your cart or reduce quantities.",
    "PRODUCT_PRICE_CHANGED": "Product prices have been updated. Please review your cart.",
    "PRICE_CHANGED": "Product prices have been updated. Please review your cart.",
    "INVALID_DISCOUNT_CODE": "Please check your discount code or remove it to continue.",
    "INVALID_DISCOUNT": "Please check your discount code or remove it to continue.",
    "DISCOUNT_EXPIRED": "This discount code has expired. Please remove it or use a different code.",
    "DISCOUNT_USAGE_EXCEEDED": "You've already used this discount code. Please remove it to continue.",
    "MINIMUM_ORDER_NOT_MET": "Add more items to your cart to meet the minimum order requirement.",
    "MAXIMUM_ORDER_EXCEEDED": "Please reduce your order total or split into multiple orders.",
    "INVALID_DELIVERY_METHOD": "Please select a valid delivery method.",
    "MISSING_DELIVERY_METHOD": "Please select a valid delivery method.",
    "INVALID_ADDRESS": "Please check your delivery address details.",
    "INVALID_PHONE": "Please provide a valid phone number.",
    "INVALID_EMAIL": "Please provide a valid email address.",
    "INVALID_EMAIL_FORMAT": "Please provide a valid email address.",
    "CART_EMPTY": "Please add items to your cart before checking out.",
    "EMPTY_CART": "Please add items to your cart before checking out.",
    "PRODUCT_NOT_FOUND": "Some products in your cart are no longer available. Please refresh your cart.",
    "PRODUCT_UNAVAILABLE": "Some products in your cart are no longer available. Please refresh your cart.",
    "INVALID_QUANTITY": "Please check the quantities in your cart.",
    "CALCULATION_MISMATCH": "There's an issue with the order total calculation. Please refresh and try again.",
    "TOTAL_CALCULATION_ERROR": "There's an issue with the order total calculation. Please refresh and try again.",
    "INVALID_USER": "Your session has expired. Please sign in again.",
}


def actionable_message(error: ValidationError) -> str:
    """Remediation text for an error, or its own message when unmapped."""
    return REMEDIATION_MESSAGES.get(error.code, error.message)


def format_validation_errors(
    errors: list[ValidationError],
    separator: str = "\n",
    actionable: bool = False,
) -> str:
    """Join error messages into a single display string ("" for no errors).

    With ``actionable`` the remediation text of each code is joined instead.
    """
    if not errors:
        return ""
    render = actionable_message if actionable else (lambda error: error.message)
    return separator.join(render(error) for error in errors)


def group_errors_by_field(errors: list[ValidationError]) -> dict[str, list[ValidationError]]:
    grouped: dict[str, list[ValidationError]] = {}
    for error in errors:
        grouped.setdefault(error.field, []).append(error)
    return grouped

