"""Unit tests for the server-side constraint validator

Tests cover:
- Delivery method against the accepted set
- Cart lines against the catalog (existence, availability, stock, price drift)
- Guest field requirements and the loose email check
- Account ownership (calling identity, saved address)
- Discount codes and total calculation
- Infrastructure failures reported as VALIDATION_ERROR
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from factories import build_authenticated_draft, build_guest_draft

from storefront.domain.orders.draft import CartLine, CustomerInfo
from storefront.domain.validation.constraints import ConstraintValidator
from storefront.domain.validation.models import ValidationContext
from storefront.domain.validation.port import DiscountValidation, ProductSnapshot


def _product(product_id: str, **overrides) -> ProductSnapshot:
    values = {
        "id": product_id,
        "name": "Linen Shirt",
        "price": Decimal("100.00"),
        "is_available": True,
        "stock_quantity": 20,
    }
    values.update(overrides)
    return ProductSnapshot(**values)


def _validator(product=None, owns_address=True, discount=None):
    catalog = AsyncMock()
    catalog.get_product.return_value = product
    addresses = AsyncMock()
    addresses.address_belongs_to.return_value = owns_address
    discounts = AsyncMock()
    discounts.validate.return_value = discount or DiscountValidation(is_valid=True)
    return ConstraintValidator(catalog, addresses, discounts)


@pytest.fixture
def guest():
    return build_guest_draft(product_id="11111111-1111-1111-1111-111111111111")


class TestDeliveryAndCart:
    """Delivery method and cart line checks"""

    async def test_valid_guest_draft(self, guest):
        validator = _validator(product=_product(guest.cart_items[0].product_id))

        result = await validator.validate_database_constraints(guest, ValidationContext())

        assert result.is_valid
        assert result.warnings == []
        validator.catalog.get_product.assert_awaited_once_with(guest.cart_items[0].product_id)

    async def test_unaccepted_delivery_method(self, guest):
        validator = _validator(product=_product(guest.cart_items[0].product_id))

        draft = build_guest_draft(product_id=guest.cart_items[0].product_id, delivery_method="courier_guy")

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == ["INVALID_DELIVERY_METHOD"]
        assert result.errors[0].message == "Invalid delivery method. Must be one of: collection, express, standard"

    async def test_empty_cart_skips_catalog(self):
        validator = _validator()
        draft = build_guest_draft(cart_items=[], subtotal=Decimal("0"), total=Decimal("99"))

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert "EMPTY_CART" in result.error_codes
        validator.catalog.get_product.assert_not_awaited()

    async def test_unknown_product(self, guest):
        validator = _validator(product=None)

        result = await validator.validate_database_constraints(guest, ValidationContext())

        assert result.error_codes == ["PRODUCT_NOT_FOUND"]
        assert guest.cart_items[0].product_id in result.errors[0].message

    async def test_unavailable_product(self, guest):
        validator = _validator(product=_product(guest.cart_items[0].product_id, is_available=False))

        result = await validator.validate_database_constraints(guest, ValidationContext())

        assert result.error_codes == ["PRODUCT_UNAVAILABLE"]

    async def test_insufficient_stock(self, guest):
        validator = _validator(product=_product(guest.cart_items[0].product_id, stock_quantity=0))

        result = await validator.validate_database_constraints(guest, ValidationContext())

        assert result.error_codes == ["INSUFFICIENT_STOCK"]
        assert "Available: 0, Requested: 1" in result.errors[0].message

    async def test_untracked_stock_is_never_insufficient(self, guest):
        validator = _validator(product=_product(guest.cart_items[0].product_id, stock_quantity=None))

        result = await validator.validate_database_constraints(guest, ValidationContext())

        assert result.is_valid

    async def test_price_drift_is_a_warning(self, guest):
        validator = _validator(product=_product(guest.cart_items[0].product_id, price=Decimal("120.00")))

        result = await validator.validate_database_constraints(guest, ValidationContext())

        assert result.is_valid
        assert result.warning_codes == ["PRICE_CHANGED"]
        assert "Current: R120.00, Cart: R100" in result.warnings[0].message

    async def test_price_within_tolerance_is_not_flagged(self, guest):
        validator = _validator(product=_product(guest.cart_items[0].product_id, price=Decimal("100.01")))

        result = await validator.validate_database_constraints(guest, ValidationContext())

        assert result.warnings == []

    async def test_non_positive_quantity(self):
        draft = build_guest_draft(cart_items=[CartLine(product_id="p1", quantity=0, price=Decimal("100"))])
        validator = _validator(product=_product("p1"))

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == ["INVALID_QUANTITY"]


class TestGuestFields:
    """Guest contact and address requirements"""

    async def test_blank_contact_fields(self, guest):
        draft = build_guest_draft(
            product_id=guest.cart_items[0].product_id,
            customer_info=CustomerInfo(full_name=" ", email="", phone=""),
        )
        validator = _validator(product=_product(guest.cart_items[0].product_id))

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == [
            "GUEST_NAME_REQUIRED",
            "GUEST_EMAIL_REQUIRED",
            "GUEST_PHONE_REQUIRED",
        ]

    async def test_loose_email_check(self, guest):
        draft = build_guest_draft(
            product_id=guest.cart_items[0].product_id,
            customer_info=CustomerInfo(full_name="Jane Doe", email="bad", phone="0821234567"),
        )
        validator = _validator(product=_product(guest.cart_items[0].product_id))

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == ["INVALID_EMAIL_FORMAT"]


class TestAccountOwnership:
    """Authenticated drafts: identity and saved address ownership"""

    async def test_matching_identity_and_owned_address(self):
        draft = build_authenticated_draft(product_id="p1")
        validator = _validator(product=_product("p1"))

        result = await validator.validate_database_constraints(
            draft, ValidationContext(current_user_id=draft.user_id)
        )

        assert result.is_valid
        validator.addresses.address_belongs_to.assert_awaited_once_with(draft.address_id, draft.user_id)

    async def test_missing_identity(self):
        draft = build_authenticated_draft(product_id="p1")
        validator = _validator(product=_product("p1"))

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == ["INVALID_USER"]

    async def test_other_users_identity(self):
        draft = build_authenticated_draft(product_id="p1")
        validator = _validator(product=_product("p1"))

        result = await validator.validate_database_constraints(
            draft, ValidationContext(current_user_id="someone-else")
        )

        assert result.error_codes == ["INVALID_USER"]

    async def test_address_not_owned(self):
        draft = build_authenticated_draft(product_id="p1")
        validator = _validator(product=_product("p1"), owns_address=False)

        result = await validator.validate_database_constraints(
            draft, ValidationContext(current_user_id=draft.user_id)
        )

        assert result.error_codes == ["INVALID_ADDRESS"]


class TestDiscountAndAmounts:
    """Discount code and monetary checks"""

    async def test_invalid_discount_uses_procedure_message(self, guest):
        draft = build_guest_draft(
            product_id=guest.cart_items[0].product_id,
            discount_code="SPRING10",
            discount_amount=Decimal("10"),
            total=Decimal("189"),
        )
        validator = _validator(
            product=_product(guest.cart_items[0].product_id),
            discount=DiscountValidation(is_valid=False, error="Discount code has expired"),
        )

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == ["INVALID_DISCOUNT"]
        assert result.errors[0].message == "Discount code has expired"
        validator.discounts.validate.assert_awaited_once_with("SPRING10", None, Decimal("100"))

    async def test_no_discount_code_skips_procedure(self, guest):
        validator = _validator(product=_product(guest.cart_items[0].product_id))

        await validator.validate_database_constraints(guest, ValidationContext())

        validator.discounts.validate.assert_not_awaited()

    async def test_negative_delivery_fee(self, guest):
        draft = build_guest_draft(
            product_id=guest.cart_items[0].product_id,
            delivery_fee=Decimal("-5"),
            total=Decimal("95"),
        )
        validator = _validator(product=_product(guest.cart_items[0].product_id))

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == ["INVALID_DELIVERY_FEE"]

    async def test_total_calculation_error(self, guest):
        draft = build_guest_draft(product_id=guest.cart_items[0].product_id, total=Decimal("150"))
        validator = _validator(product=_product(guest.cart_items[0].product_id))

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == ["TOTAL_CALCULATION_ERROR"]
        assert result.errors[0].message == (
            "Order total calculation error. Expected: R199.00, Received: R150.00"
        )

    async def test_total_within_tolerance(self, guest):
        draft = build_guest_draft(product_id=guest.cart_items[0].product_id, total=Decimal("199.01"))
        validator = _validator(product=_product(guest.cart_items[0].product_id))

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.is_valid


class TestInfrastructureFailure:
    """Lookup failures never propagate"""

    async def test_catalog_failure_becomes_validation_error(self, guest):
        validator = _validator()
        validator.catalog.get_product.side_effect = ConnectionError("database unreachable")

        result = await validator.validate_database_constraints(guest, ValidationContext())

        assert result.error_codes == ["VALIDATION_ERROR"]
        assert result.errors[0].field == "general"
        assert result.errors[0].message == "An error occurred during validation. Please try again."

    async def test_errors_found_before_failure_are_kept(self, guest):
        draft = build_guest_draft(product_id=guest.cart_items[0].product_id, delivery_method="pudo")
        validator = _validator()
        validator.catalog.get_product.side_effect = ConnectionError("database unreachable")

        result = await validator.validate_database_constraints(draft, ValidationContext())

        assert result.error_codes == ["INVALID_DELIVERY_METHOD", "VALIDATION_ERROR"]
