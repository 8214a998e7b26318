"""Unit tests for the business rules that need no external data

Tests cover:
- Cart emptiness and per-item quantities
- Total and delivery method presence
- Guest contact and address fields, email format
- Authenticated account references
- Every check runs (no short-circuit)
"""

from decimal import Decimal

from factories import build_authenticated_draft, build_guest_draft

from storefront.domain.orders.draft import CartLine, CustomerInfo, DeliveryAddress
from storefront.domain.validation.models import ValidationContext, ValidationSeverity
from storefront.domain.validation.rules import validate_business_rules


class TestCartRules:
    """Cart and quantity rules"""

    def test_valid_guest_draft_has_no_issues(self):
        result = validate_business_rules(build_guest_draft())

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_empty_cart(self):
        result = validate_business_rules(build_guest_draft(cart_items=[]))

        assert "CART_EMPTY" in result.error_codes
        error = result.errors[result.error_codes.index("CART_EMPTY")]
        assert error.field == "cartItems"

    def test_zero_quantity_is_an_error(self):
        draft = build_guest_draft(cart_items=[CartLine(product_id="p1", quantity=0, price=Decimal("100"))])

        result = validate_business_rules(draft)

        assert result.error_codes == ["INVALID_QUANTITY"]
        assert result.errors[0].field == "cartItems[0].quantity"

    def test_large_quantity_is_only_a_warning(self):
        draft = build_guest_draft(cart_items=[CartLine(product_id="p1", quantity=15, price=Decimal("100"))])

        result = validate_business_rules(draft)

        assert result.is_valid
        assert result.warning_codes == ["LARGE_QUANTITY"]
        assert result.warnings[0].severity == ValidationSeverity.WARNING
        assert result.warnings[0].message == "Large quantity order - please verify"

    def test_quantity_at_maximum_is_not_flagged(self):
        draft = build_guest_draft(cart_items=[CartLine(product_id="p1", quantity=10, price=Decimal("100"))])

        assert validate_business_rules(draft).warnings == []

    def test_quantity_threshold_comes_from_context(self):
        draft = build_guest_draft(cart_items=[CartLine(product_id="p1", quantity=4, price=Decimal("100"))])

        result = validate_business_rules(draft, ValidationContext(max_quantity_per_item=3))

        assert result.warning_codes == ["LARGE_QUANTITY"]

    def test_quantity_field_uses_item_index(self):
        draft = build_guest_draft(cart_items=[
            CartLine(product_id="p1", quantity=1, price=Decimal("50")),
            CartLine(product_id="p2", quantity=-1, price=Decimal("50")),
        ])

        result = validate_business_rules(draft)

        assert result.errors[0].field == "cartItems[1].quantity"


class TestOrderRules:
    """Total and delivery method rules"""

    def test_zero_total(self):
        result = validate_business_rules(build_guest_draft(total=Decimal("0")))

        assert "INVALID_TOTAL" in result.error_codes

    def test_blank_delivery_method(self):
        result = validate_business_rules(build_guest_draft(delivery_method="   "))

        assert result.error_codes == ["MISSING_DELIVERY_METHOD"]
        assert result.errors[0].field == "deliveryMethod"

    def test_unknown_delivery_method_is_not_a_business_rule(self):
        """Only presence is checked here; accepted values are a server concern"""
        result = validate_business_rules(build_guest_draft(delivery_method="courier_guy"))

        assert result.is_valid

    def test_total_mismatch_is_not_checked(self):
        result = validate_business_rules(build_guest_draft(total=Decimal("150")))

        assert result.is_valid


class TestGuestDetails:
    """Guest contact and address rules"""

    def test_missing_name_and_invalid_email(self):
        draft = build_guest_draft(
            customer_info=CustomerInfo(full_name="", email="bad", phone="0821234567"),
        )

        result = validate_business_rules(draft)

        assert result.error_codes == ["MISSING_NAME", "INVALID_EMAIL"]

    def test_missing_email_is_not_also_invalid(self):
        draft = build_guest_draft(
            customer_info=CustomerInfo(full_name="Jane Doe", email="", phone="0821234567"),
        )

        result = validate_business_rules(draft)

        assert result.error_codes == ["MISSING_EMAIL"]

    def test_email_with_spaces_is_invalid(self):
        draft = build_guest_draft(
            customer_info=CustomerInfo(full_name="Jane Doe", email="jane doe@example.com", phone="0821234567"),
        )

        assert validate_business_rules(draft).error_codes == ["INVALID_EMAIL"]

    def test_whitespace_phone_is_missing(self):
        draft = build_guest_draft(
            customer_info=CustomerInfo(full_name="Jane Doe", email="jane@example.com", phone="  "),
        )

        assert validate_business_rules(draft).error_codes == ["MISSING_PHONE"]

    def test_blank_address_reports_every_field(self):
        draft = build_guest_draft(
            address=DeliveryAddress(street_address="", city="", province="", postal_code=""),
        )

        result = validate_business_rules(draft)

        assert result.error_codes == [
            "MISSING_ADDRESS",
            "MISSING_CITY",
            "MISSING_PROVINCE",
            "MISSING_POSTAL_CODE",
        ]
        assert [e.field for e in result.errors] == [
            "address.street_address",
            "address.city",
            "address.province",
            "address.postal_code",
        ]


class TestAuthenticatedReferences:
    """Authenticated draft references"""

    def test_valid_authenticated_draft(self):
        assert validate_business_rules(build_authenticated_draft()).is_valid

    def test_missing_user_and_address_ids(self):
        result = validate_business_rules(build_authenticated_draft(user_id="", address_id=""))

        assert result.error_codes == ["MISSING_USER_ID", "MISSING_ADDRESS_ID"]


class TestNoShortCircuit:
    """All violations are reported together"""

    def test_every_failing_rule_is_reported(self):
        draft = build_guest_draft(
            cart_items=[],
            total=Decimal("0"),
            delivery_method="",
            customer_info=CustomerInfo(full_name="", email="", phone=""),
        )

        result = validate_business_rules(draft)

        assert result.error_codes == [
            "CART_EMPTY",
            "INVALID_TOTAL",
            "MISSING_DELIVERY_METHOD",
            "MISSING_NAME",
            "MISSING_EMAIL",
            "MISSING_PHONE",
        ]
