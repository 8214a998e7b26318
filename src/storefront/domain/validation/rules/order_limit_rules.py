"""Order value limits: minimum order value and fraud-prevention maximum."""

from ...orders.draft import OrderDraft
from ..models import ValidationCode, ValidationContext, ValidationError, ValidationResult


def validate_order_limits(draft: OrderDraft, context: ValidationContext) -> ValidationResult:
    """Check the draft against the configured order value limits.

    Rules:
    - MINIMUM_ORDER_NOT_MET (warning): subtotal below the minimum order value;
      such orders may take longer to process but are accepted
    - MAXIMUM_ORDER_EXCEEDED (error): total above the maximum order value

    Args:
        draft: Order draft
        context: Validation context with min/max order value

    Returns:
        ValidationResult for the limit checks
    """
    errors = []
    warnings = []

    if draft.subtotal < context.min_order_value:
        warnings.append(ValidationError.warning(
            "subtotal",
            ValidationCode.MINIMUM_ORDER_NOT_MET,
            f"Orders under R{context.min_order_value} may have extended processing times",
        ))

    if draft.total > context.max_order_value:
        errors.append(ValidationError.error(
            "total",
            ValidationCode.MAXIMUM_ORDER_EXCEEDED,
            f"Order total exceeds maximum allowed amount of R{context.max_order_value}",
        ))

    return ValidationResult(errors=errors, warnings=warnings)
