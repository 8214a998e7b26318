"""Product SQLAlchemy model"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, Text, Uuid
from sqlalchemy.sql import func

from .base import Base


class Product(Base):
    """Catalog product.

    ``stock_quantity`` is NULL when stock is not tracked for the product.
    """
    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(Text, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    stock_quantity = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
