"""Order, OrderItem and CartItem SQLAlchemy models"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class Order(Base):
    """Persisted order.

    Either a customer order (user_id + address_id) or a guest order with the
    contact and address captured inline; the check constraint enforces that
    exactly one of the two shapes is stored.
    """
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NOT NULL AND is_guest_order = false) OR "
            "(user_id IS NULL AND is_guest_order = true AND guest_name IS NOT NULL AND guest_email IS NOT NULL)",
            name="check_user_or_guest",
        ),
        Index("idx_orders_is_guest", "is_guest_order"),
        Index("idx_orders_guest_email", "guest_email"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(Text, nullable=False, unique=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    address_id = Column(Uuid(as_uuid=True), ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True)
    is_guest_order = Column(Boolean, nullable=False, default=False)

    guest_name = Column(Text, nullable=True)
    guest_email = Column(Text, nullable=True)
    guest_phone = Column(Text, nullable=True)
    guest_address_line1 = Column(Text, nullable=True)
    guest_address_line2 = Column(Text, nullable=True)
    guest_city = Column(Text, nullable=True)
    guest_province = Column(Text, nullable=True)
    guest_postal_code = Column(Text, nullable=True)

    delivery_method = Column(Text, nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    discount_code = Column(Text, nullable=True)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(Text, nullable=False, default="pending")
    payment_status = Column(Text, nullable=False, default="awaiting_payment")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """One line of a persisted order, priced at the authoritative price."""
    __tablename__ = "order_items"
    __table_args__ = (
        Index("ix_order_items_order_id", "order_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    size = Column(Text, nullable=True)
    color = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")


class CartItem(Base):
    """Server-side cart line for a signed-in customer."""
    __tablename__ = "cart_items"
    __table_args__ = (
        Index("ix_cart_items_user_id", "user_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    size = Column(Text, nullable=True)
    color = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    product = relationship("Product")
