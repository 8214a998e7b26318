"""Unit tests for the order value limits"""

from decimal import Decimal

from factories import build_guest_draft

from storefront.domain.validation.models import ValidationContext
from storefront.domain.validation.rules import validate_order_limits


class TestOrderLimits:
    """Minimum order value (warning) and maximum order value (error)"""

    def test_within_limits(self):
        result = validate_order_limits(build_guest_draft(), ValidationContext())

        assert result.is_valid
        assert result.warnings == []

    def test_subtotal_below_minimum_warns(self):
        draft = build_guest_draft(subtotal=Decimal("30"), total=Decimal("129"))

        result = validate_order_limits(draft, ValidationContext())

        assert result.is_valid
        assert result.warning_codes == ["MINIMUM_ORDER_NOT_MET"]
        assert result.warnings[0].field == "subtotal"

    def test_total_above_maximum_is_an_error(self):
        draft = build_guest_draft(subtotal=Decimal("15000"), total=Decimal("15099"))

        result = validate_order_limits(draft, ValidationContext())

        assert result.error_codes == ["MAXIMUM_ORDER_EXCEEDED"]
        assert "10000" in result.errors[0].message

    def test_total_equal_to_maximum_is_allowed(self):
        draft = build_guest_draft(subtotal=Decimal("9901"), total=Decimal("10000"))

        assert validate_order_limits(draft, ValidationContext()).is_valid

    def test_limits_come_from_context(self):
        context = ValidationContext(min_order_value=Decimal("500"), max_order_value=Decimal("150"))

        result = validate_order_limits(build_guest_draft(), context)

        assert result.error_codes == ["MAXIMUM_ORDER_EXCEEDED"]
        assert result.warning_codes == ["MINIMUM_ORDER_NOT_MET"]
