"""Pydantic schemas for checkout endpoints."""

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from ..domain.orders.draft import (
    AuthenticatedOrderDraft,
    CartLine,
    CustomerInfo,
    DeliveryAddress,
    GuestOrderDraft,
)
from ..domain.validation.messages import actionable_message
from ..domain.validation.models import ValidationError, ValidationResult


class CartLineIn(BaseModel):
    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(..., description="Requested quantity")
    price: Decimal = Field(..., description="Unit price as shown in the cart")
    size: Optional[str] = None
    color: Optional[str] = None

    def to_domain(self) -> CartLine:
        return CartLine(
            product_id=self.product_id,
            quantity=self.quantity,
            price=self.price,
            size=self.size,
            color=self.color,
        )


class CustomerInfoIn(BaseModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""


class AddressIn(BaseModel):
    street_address: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    phone: str = ""


class _DraftAmounts(BaseModel):
    cart_items: list[CartLineIn] = Field(default_factory=list)
    delivery_method: str = ""
    delivery_fee: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")
    discount_code: Optional[str] = None
    discount_amount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")

    def _common(self) -> dict:
        return {
            "cart_items": [line.to_domain() for line in self.cart_items],
            "delivery_method": self.delivery_method,
            "delivery_fee": self.delivery_fee,
            "subtotal": self.subtotal,
            "discount_code": self.discount_code or None,
            "discount_amount": self.discount_amount,
            "total": self.total,
        }


class GuestCheckoutRequest(_DraftAmounts):
    """Guest checkout: contact, address and cart all come from the client."""
    kind: Literal["guest"] = "guest"
    customer_info: CustomerInfoIn
    address: AddressIn

    def to_draft(self) -> GuestOrderDraft:
        address_phone = self.address.phone or self.customer_info.phone
        return GuestOrderDraft(
            customer_info=CustomerInfo(**self.customer_info.model_dump()),
            address=DeliveryAddress(**{**self.address.model_dump(), "phone": address_phone}),
            **self._common(),
        )


class AuthenticatedDraftIn(_DraftAmounts):
    """Authenticated draft as the client sees it (validation only)."""
    kind: Literal["authenticated"] = "authenticated"
    user_id: str = ""
    address_id: str = ""

    def to_draft(self) -> AuthenticatedOrderDraft:
        return AuthenticatedOrderDraft(
            user_id=self.user_id,
            address_id=self.address_id,
            **self._common(),
        )


DraftIn = Annotated[Union[GuestCheckoutRequest, AuthenticatedDraftIn], Field(discriminator="kind")]


class ValidateDraftRequest(BaseModel):
    draft: DraftIn


class AuthenticatedCheckoutRequest(BaseModel):
    """Authenticated checkout.

    The cart and prices are read from the server-side cart; the client sends
    the amounts it displayed so mismatches are caught by validation.
    """
    address_id: str
    delivery_method: str
    delivery_fee: Decimal = Decimal("0")
    discount_code: Optional[str] = None
    discount_amount: Decimal = Decimal("0")
    total: Decimal


class ValidationIssueOut(BaseModel):
    field: str
    message: str
    code: str
    severity: str
    remediation: str = Field(..., description="User-facing advice for this issue")

    @classmethod
    def from_domain(cls, error: ValidationError) -> "ValidationIssueOut":
        return cls(
            field=error.field,
            message=error.message,
            code=error.code,
            severity=error.severity.value,
            remediation=actionable_message(error),
        )


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: list[ValidationIssueOut]
    warnings: list[ValidationIssueOut]

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationResponse":
        return cls(
            is_valid=result.is_valid,
            errors=[ValidationIssueOut.from_domain(e) for e in result.errors],
            warnings=[ValidationIssueOut.from_domain(w) for w in result.warnings],
        )


class WhatsAppHandoff(BaseModel):
    """Messages and links for arranging manual payment."""
    merchant_message: str
    customer_message: str
    merchant_url: str = Field(..., description="wa.me link to the business number with the order details")
    customer_url: str = Field(..., description="wa.me link to the customer's number with the confirmation")


class CheckoutResponse(BaseModel):
    order_id: UUID
    order_number: str
    status: str
    payment_status: str
    total: Decimal
    clear_local_cart: bool = Field(..., description="True when the client must clear its local (guest) cart")
    warnings: list[ValidationIssueOut] = Field(default_factory=list)
    whatsapp: WhatsAppHandoff

    class Config:
        json_schema_extra = {
            "example": {
                "order_id": "550e8400-e29b-41d4-a716-446655440000",
                "order_number": "GUEST-1760870400000-A1B2C3D4E",
                "status": "pending",
                "payment_status": "awaiting_payment",
                "total": "199.00",
                "clear_local_cart": True,
                "warnings": [],
                "whatsapp": {
                    "merchant_message": "🛍️ *NEW ORDER RECEIVED* 🛍️ ...",
                    "customer_message": "Hi Jane! 🎉 ...",
                    "merchant_url": "https://wa.me/27634009626?text=...",
                    "customer_url": "https://wa.me/27821234567?text=...",
                },
            }
        }
