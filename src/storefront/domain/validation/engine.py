"""OrderValidationEngine - composite order validation.

Runs the synchronous rules (business rules and order limits) and the
database constraint checks concurrently and merges their results.
"""

import asyncio
import logging

from ...observability.metrics import order_validations_total, validation_issues_total
from ..orders.draft import OrderDraft
from .constraints import ConstraintValidator
from .models import ValidationContext, ValidationResult
from .port import OrderValidatorPort
from .rules import validate_business_rules, validate_order_limits

logger = logging.getLogger(__name__)


class OrderValidationEngine(OrderValidatorPort):
    """Concrete implementation of OrderValidatorPort.

    The merged result is valid only when both halves are valid. Errors from
    overlapping checks (empty cart, quantity) appear once per validator that
    found them; they are kept so the audit trail shows which side flagged
    what. No ordering is guaranteed between the two halves.
    """

    def __init__(self, constraint_validator: ConstraintValidator):
        self.constraint_validator = constraint_validator

    def validate_rules(self, draft: OrderDraft, context: ValidationContext) -> ValidationResult:
        """Run every synchronous rule set and merge the results."""
        result = validate_business_rules(draft, context)
        return result.merge(validate_order_limits(draft, context))

    async def _validate_rules_async(self, draft: OrderDraft, context: ValidationContext) -> ValidationResult:
        return self.validate_rules(draft, context)

    async def validate_order(self, draft: OrderDraft, context: ValidationContext) -> ValidationResult:
        """Validate a draft against business rules and database constraints.

        Args:
            draft: Guest or authenticated order draft
            context: Calling identity and configured thresholds

        Returns:
            ValidationResult with the union of both halves' errors and warnings
        """
        constraint_result, rule_result = await asyncio.gather(
            self.constraint_validator.validate_database_constraints(draft, context),
            self._validate_rules_async(draft, context),
        )
        result = constraint_result.merge(rule_result)

        outcome = "valid" if result.is_valid else "invalid"
        order_validations_total.labels(draft_kind=draft.kind.value, result=outcome).inc()
        for issue in [*result.errors, *result.warnings]:
            validation_issues_total.labels(code=issue.code, severity=issue.severity.value).inc()

        logger.info(
            f"Order validation completed ({draft.kind.value}): {outcome}, "
            f"{len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result
