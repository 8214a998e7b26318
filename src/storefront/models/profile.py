"""Profile and Address SQLAlchemy models"""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class Profile(Base):
    """Customer or administrator profile keyed by the identity provider's user id."""
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("role IN ('customer', 'admin')", name="ck_profiles_role"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    role = Column(Text, nullable=False, default="customer")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    addresses = relationship("Address", back_populates="user")


class Address(Base):
    """Saved delivery address owned by one profile."""
    __tablename__ = "addresses"
    __table_args__ = (
        Index("ix_addresses_user_id", "user_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    full_name = Column(Text, nullable=False)
    street_address = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    province = Column(Text, nullable=False)
    postal_code = Column(Text, nullable=False)
    phone = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("Profile", back_populates="addresses")
