"""Checkout orchestration for guest and authenticated orders.

Both flows follow the same steps:
1. build the draft (authenticated: cart and prices from the server cart)
2. flag suspicious quantities in the audit trail
3. composite validation; an invalid draft is audited and rejected
4. create the order and its items (pending / awaiting_payment)
5. clear the server cart, or tell the client to clear its local cart
6. audit any warnings of the successful validation
7. hand off to manual payment over WhatsApp
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..audit.service import OrderAuditLogger
from ..config import Settings
from ..domain.orders.draft import (
    AuthenticatedOrderDraft,
    CartLine,
    DraftKind,
    GuestOrderDraft,
    OrderDraft,
)
from ..domain.validation.models import ValidationContext, ValidationError
from ..domain.validation.port import OrderValidatorPort
from ..infrastructure.repositories.catalog_repository import parse_uuid
from ..infrastructure.repositories.order_repository import OrderRepository
from ..models.order import Order
from ..observability.metrics import orders_created_total
from .exceptions import OrderPersistenceError, OrderValidationFailed
from .messaging import (
    DeliveryContact,
    MessageItem,
    OrderMessageDetails,
    format_customer_confirmation,
    format_merchant_order_message,
    whatsapp_link,
)

logger = logging.getLogger(__name__)

GUEST_ORDER_PREFIX = "GUEST"
ORDER_PREFIX = "ORD"


def generate_order_number(prefix: str) -> str:
    """<prefix>-<epoch ms>-<9 uppercase characters>"""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9].upper()}"


@dataclass
class WhatsAppMessages:
    merchant_message: str
    customer_message: str
    merchant_url: str
    customer_url: str


@dataclass
class CheckoutResult:
    order: Order
    clear_local_cart: bool
    whatsapp: WhatsAppMessages
    warnings: list[ValidationError] = field(default_factory=list)


class CheckoutService:
    """Places orders after validation, with a full audit trail.

    Example:
        service = CheckoutService(session, validator, audit_logger, settings)
        result = await service.place_guest_order(draft)
    """

    def __init__(
        self,
        session: AsyncSession,
        validator: OrderValidatorPort,
        audit: OrderAuditLogger,
        settings: Settings,
    ):
        self.session = session
        self.validator = validator
        self.audit = audit
        self.settings = settings
        self.orders = OrderRepository(session)

    async def place_guest_order(self, draft: GuestOrderDraft) -> CheckoutResult:
        """Place an order for an anonymous customer.

        Raises:
            OrderValidationFailed: Draft is invalid (nothing persisted)
            OrderPersistenceError: Order could not be stored
        """
        context = ValidationContext.from_settings(self.settings)
        return await self._place(draft, context, GUEST_ORDER_PREFIX)

    async def place_authenticated_order(
        self,
        user_id: str,
        address_id: str,
        delivery_method: str,
        total: Decimal,
        delivery_fee: Decimal = Decimal("0"),
        discount_code: Optional[str] = None,
        discount_amount: Decimal = Decimal("0"),
    ) -> CheckoutResult:
        """Place an order for a signed-in customer from their server cart.

        Raises:
            OrderValidationFailed: Draft is invalid (nothing persisted)
            OrderPersistenceError: Order could not be stored
        """
        draft = await self.build_authenticated_draft(
            user_id=user_id,
            address_id=address_id,
            delivery_method=delivery_method,
            total=total,
            delivery_fee=delivery_fee,
            discount_code=discount_code,
            discount_amount=discount_amount,
        )
        context = ValidationContext.from_settings(self.settings, current_user_id=user_id)
        return await self._place(draft, context, ORDER_PREFIX)

    async def build_authenticated_draft(
        self,
        user_id: str,
        address_id: str,
        delivery_method: str,
        total: Decimal,
        delivery_fee: Decimal = Decimal("0"),
        discount_code: Optional[str] = None,
        discount_amount: Decimal = Decimal("0"),
    ) -> AuthenticatedOrderDraft:
        """Draft from the user's server cart at authoritative prices."""
        cart = await self.orders.get_cart(user_id)
        lines = [
            CartLine(
                product_id=row.product_id,
                quantity=row.quantity,
                price=row.price,
                size=row.size,
                color=row.color,
            )
            for row in cart
        ]
        subtotal = sum((line.price * line.quantity for line in lines), Decimal("0"))

        return AuthenticatedOrderDraft(
            user_id=user_id,
            address_id=address_id,
            cart_items=lines,
            delivery_method=delivery_method,
            delivery_fee=delivery_fee,
            subtotal=subtotal,
            discount_code=discount_code or None,
            discount_amount=discount_amount,
            total=total,
        )

    async def _place(self, draft: OrderDraft, context: ValidationContext, prefix: str) -> CheckoutResult:
        await self._flag_suspicious_quantities(draft)

        result = await self.validator.validate_order(draft, context)
        if not result.is_valid:
            await self.audit.log_validation_violation(
                draft,
                [*result.errors, *result.warnings],
                context={"checkout_type": draft.kind.value},
            )
            raise OrderValidationFailed(result)

        order_number = generate_order_number(prefix)
        product_ids = [line.product_id for line in draft.cart_items]

        try:
            products = await self.orders.get_products(product_ids)
            prices = {pid: Decimal(product.price) for pid, product in products.items()}
            order = await self.orders.create_order(draft, order_number, prices)
            if draft.kind == DraftKind.AUTHENTICATED:
                await self.orders.clear_cart(draft.user_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Order creation failed: {e}",
                exc_info=True,
                extra={"order_number": order_number, "session_id": self.audit.session_id},
            )
            await self.audit.log_order_blocked(
                draft,
                f"Failed to create order: {e.__class__.__name__}",
                context={"order_number": order_number, "checkout_type": draft.kind.value},
            )
            raise OrderPersistenceError(order_number) from e

        orders_created_total.labels(checkout_type=draft.kind.value).inc()
        logger.info(
            f"Order created ({draft.kind.value})",
            extra={
                "order_number": order_number,
                "user_id": draft.user_id,
                "session_id": self.audit.session_id,
            },
        )

        await self.audit.log_validation_success(draft, result.warnings)

        names = {pid: product.name for pid, product in products.items()}
        whatsapp = await self._whatsapp_messages(draft, order_number, names, prices)

        return CheckoutResult(
            order=order,
            clear_local_cart=draft.kind == DraftKind.GUEST,
            whatsapp=whatsapp,
            warnings=result.warnings,
        )

    async def _flag_suspicious_quantities(self, draft: OrderDraft) -> None:
        threshold = self.settings.SUSPICIOUS_QUANTITY_THRESHOLD
        flagged = [line for line in draft.cart_items if line.quantity > threshold]
        if not flagged:
            return

        await self.audit.log_suspicious_activity(
            f"Unusually large quantity requested (more than {threshold} of a single product)",
            draft,
            context={
                "threshold": threshold,
                "lines": [
                    {"product_id": line.product_id, "quantity": line.quantity}
                    for line in flagged
                ],
            },
        )

    async def _whatsapp_messages(
        self,
        draft: OrderDraft,
        order_number: str,
        names: dict[uuid.UUID, str],
        prices: dict[uuid.UUID, Decimal],
    ) -> WhatsAppMessages:
        if draft.kind == DraftKind.GUEST:
            customer = draft.customer_info
            customer_name, customer_email, customer_phone = customer.full_name, customer.email, customer.phone
            delivery = DeliveryContact(
                full_name=customer.full_name,
                street_address=draft.address.street_address,
                city=draft.address.city,
                province=draft.address.province,
                postal_code=draft.address.postal_code,
                phone=draft.address.phone or customer.phone,
            )
        else:
            profile = await self.orders.get_profile(draft.user_id)
            address = await self.orders.get_address(draft.address_id, draft.user_id)
            customer_name = (profile.full_name if profile else None) or address.full_name
            customer_email = (profile.email if profile else None) or ""
            customer_phone = (profile.phone if profile else None) or address.phone
            delivery = DeliveryContact(
                full_name=address.full_name,
                street_address=address.street_address,
                city=address.city,
                province=address.province,
                postal_code=address.postal_code,
                phone=address.phone,
            )

        details = OrderMessageDetails(
            order_number=order_number,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            delivery_address=delivery,
            delivery_method=draft.delivery_method,
            delivery_fee=draft.delivery_fee,
            subtotal=draft.subtotal,
            total=draft.total,
            discount_amount=draft.discount_amount or Decimal("0"),
            discount_code=draft.discount_code,
            items=[
                MessageItem(
                    name=names.get(parse_uuid(line.product_id), "Unknown Product"),
                    price=prices.get(parse_uuid(line.product_id), line.price),
                    quantity=line.quantity,
                    size=line.size,
                    color=line.color,
                )
                for line in draft.cart_items
            ],
        )

        currency = self.settings.CURRENCY_SYMBOL
        merchant_message = format_merchant_order_message(details, currency=currency)
        customer_message = format_customer_confirmation(
            details,
            store_name=self.settings.STORE_NAME,
            app_url=self.settings.APP_URL,
            currency=currency,
        )
        return WhatsAppMessages(
            merchant_message=merchant_message,
            customer_message=customer_message,
            merchant_url=whatsapp_link(self.settings.BUSINESS_WHATSAPP_NUMBER, merchant_message),
            customer_url=whatsapp_link(customer_phone, customer_message),
        )
