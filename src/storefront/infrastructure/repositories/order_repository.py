"""Repository for checkout persistence: carts, saved addresses and orders."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.orders.draft import DraftKind, OrderDraft
from ...models.order import CartItem, Order, OrderItem
from ...models.product import Product
from ...models.profile import Address, Profile
from .catalog_repository import parse_uuid


@dataclass
class CartRow:
    """A server-side cart line joined with its product."""
    product_id: str
    name: str
    quantity: int
    price: Decimal
    size: Optional[str] = None
    color: Optional[str] = None


class OrderRepository:
    """Checkout reads and writes. Writes are flushed; the caller commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        pk = parse_uuid(user_id)
        if pk is None:
            return None
        return await self.session.get(Profile, pk)

    async def get_address(self, address_id: str, user_id: str) -> Optional[Address]:
        """The saved address, only if it belongs to the user."""
        address_pk = parse_uuid(address_id)
        user_pk = parse_uuid(user_id)
        if address_pk is None or user_pk is None:
            return None

        result = await self.session.execute(
            select(Address).where(Address.id == address_pk, Address.user_id == user_pk)
        )
        return result.scalar_one_or_none()

    async def get_cart(self, user_id: str) -> list[CartRow]:
        """The user's server cart at authoritative product prices."""
        user_pk = parse_uuid(user_id)
        if user_pk is None:
            return []

        result = await self.session.execute(
            select(CartItem, Product)
            .join(Product, CartItem.product_id == Product.id)
            .where(CartItem.user_id == user_pk)
            .order_by(CartItem.created_at)
        )
        return [
            CartRow(
                product_id=str(product.id),
                name=product.name,
                quantity=item.quantity,
                price=Decimal(product.price),
                size=item.size,
                color=item.color,
            )
            for item, product in result.all()
        ]

    async def get_products(self, product_ids: list[str]) -> dict[UUID, Product]:
        """Products by id; unknown or malformed ids are omitted."""
        pks = [pk for pk in (parse_uuid(pid) for pid in product_ids) if pk is not None]
        if not pks:
            return {}
        result = await self.session.execute(select(Product).where(Product.id.in_(pks)))
        return {product.id: product for product in result.scalars().all()}

    async def create_order(
        self,
        draft: OrderDraft,
        order_number: str,
        prices: dict[UUID, Decimal],
    ) -> Order:
        """Insert the order and its items.

        Items are priced from ``prices`` (authoritative), falling back to the
        draft's captured price for products missing from it.
        """
        order = Order(
            order_number=order_number,
            delivery_method=draft.delivery_method,
            delivery_fee=draft.delivery_fee,
            discount_code=draft.discount_code,
            discount_amount=draft.discount_amount or Decimal("0"),
            total_amount=draft.total,
            status="pending",
            payment_status="awaiting_payment",
        )

        if draft.kind == DraftKind.GUEST:
            order.is_guest_order = True
            order.guest_name = draft.customer_info.full_name
            order.guest_email = draft.customer_info.email
            order.guest_phone = draft.customer_info.phone
            order.guest_address_line1 = draft.address.street_address
            order.guest_city = draft.address.city
            order.guest_province = draft.address.province
            order.guest_postal_code = draft.address.postal_code
        elif draft.kind == DraftKind.AUTHENTICATED:
            order.is_guest_order = False
            order.user_id = UUID(draft.user_id)
            order.address_id = UUID(draft.address_id)

        order.items = [
            OrderItem(
                product_id=UUID(line.product_id),
                quantity=line.quantity,
                price=prices.get(UUID(line.product_id), line.price),
                size=line.size,
                color=line.color,
            )
            for line in draft.cart_items
        ]

        self.session.add(order)
        await self.session.flush()
        return order

    async def clear_cart(self, user_id: str) -> None:
        user_pk = parse_uuid(user_id)
        if user_pk is None:
            return
        await self.session.execute(delete(CartItem).where(CartItem.user_id == user_pk))
