"""Checkout endpoints.

- POST /checkout/validate: composite validation of a draft, nothing persisted
- POST /checkout/guest: guest checkout (no authentication)
- POST /checkout: authenticated checkout from the server cart

Validation failures are returned as 422 by the OrderValidationFailed handler
registered in main.py.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from ..auth.dependencies import CurrentIdentity, get_current_identity, get_optional_identity
from ..config import Settings, get_settings
from ..dependencies import get_checkout_service, get_order_validator
from ..domain.validation.engine import OrderValidationEngine
from ..domain.validation.models import ValidationContext
from .schemas import (
    AuthenticatedCheckoutRequest,
    CheckoutResponse,
    GuestCheckoutRequest,
    ValidateDraftRequest,
    ValidationIssueOut,
    ValidationResponse,
    WhatsAppHandoff,
)
from .service import CheckoutResult, CheckoutService

router = APIRouter(prefix="/checkout", tags=["Checkout"])


def _to_response(result: CheckoutResult) -> CheckoutResponse:
    order = result.order
    return CheckoutResponse(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        total=order.total_amount,
        clear_local_cart=result.clear_local_cart,
        warnings=[ValidationIssueOut.from_domain(w) for w in result.warnings],
        whatsapp=WhatsAppHandoff(
            merchant_message=result.whatsapp.merchant_message,
            customer_message=result.whatsapp.customer_message,
            merchant_url=result.whatsapp.merchant_url,
            customer_url=result.whatsapp.customer_url,
        ),
    )


@router.post(
    "/validate",
    response_model=ValidationResponse,
    summary="Validate an order draft",
    description="Runs business rules, order limits and database constraint checks without placing an order.",
)
async def validate_draft(
    payload: ValidateDraftRequest,
    validator: OrderValidationEngine = Depends(get_order_validator),
    identity: Optional[CurrentIdentity] = Depends(get_optional_identity),
    settings: Settings = Depends(get_settings),
) -> ValidationResponse:
    context = ValidationContext.from_settings(
        settings,
        current_user_id=identity.user_id if identity else None,
    )
    result = await validator.validate_order(payload.draft.to_draft(), context)
    return ValidationResponse.from_result(result)


@router.post(
    "/guest",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place a guest order",
)
async def guest_checkout(
    payload: GuestCheckoutRequest,
    service: CheckoutService = Depends(get_checkout_service),
) -> CheckoutResponse:
    result = await service.place_guest_order(payload.to_draft())
    return _to_response(result)


@router.post(
    "",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order from the signed-in customer's cart",
)
async def authenticated_checkout(
    payload: AuthenticatedCheckoutRequest,
    identity: CurrentIdentity = Depends(get_current_identity),
    service: CheckoutService = Depends(get_checkout_service),
) -> CheckoutResponse:
    result = await service.place_authenticated_order(
        user_id=identity.user_id,
        address_id=payload.address_id,
        delivery_method=payload.delivery_method,
        total=payload.total,
        delivery_fee=payload.delivery_fee,
        discount_code=payload.discount_code,
        discount_amount=payload.discount_amount,
    )
    return _to_response(result)
