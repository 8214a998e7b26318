"""SQL adapters for the order validation ports.

Ids arrive as strings from the draft; an id that is not a UUID cannot exist
in the database and is treated as not found.
"""

import json
import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.validation.port import (
    AddressDirectoryPort,
    DiscountValidation,
    DiscountValidatorPort,
    ProductCatalogPort,
    ProductSnapshot,
)
from ...models.product import Product
from ...models.profile import Address

logger = logging.getLogger(__name__)


def parse_uuid(value) -> Optional[UUID]:
    """Parse a UUID string, returning None for anything unparseable."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class SqlProductCatalog(ProductCatalogPort):
    """Product lookups against the products table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_product(self, product_id: str) -> Optional[ProductSnapshot]:
        pk = parse_uuid(product_id)
        if pk is None:
            return None

        product = await self.session.get(Product, pk)
        if product is None:
            return None

        return ProductSnapshot(
            id=str(product.id),
            name=product.name,
            price=Decimal(product.price),
            is_available=product.is_available,
            stock_quantity=product.stock_quantity,
        )


class SqlAddressDirectory(AddressDirectoryPort):
    """Address ownership lookups against the addresses table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def address_belongs_to(self, address_id: str, user_id: str) -> bool:
        address_pk = parse_uuid(address_id)
        user_pk = parse_uuid(user_id)
        if address_pk is None or user_pk is None:
            return False

        result = await self.session.execute(
            select(Address.id).where(Address.id == address_pk, Address.user_id == user_pk)
        )
        return result.scalar_one_or_none() is not None


class SqlDiscountValidator(DiscountValidatorPort):
    """Calls the database's ``validate_discount_code`` function.

    The function returns a JSON object ``{valid, error, discount_amount}``.
    Any failure is reported as an invalid code, never raised.
    """

    FAILURE_MESSAGE = "Failed to validate discount code"

    def __init__(self, session: AsyncSession):
        self.session = session

    async def validate(
        self,
        code: str,
        user_id: Optional[str],
        order_total: Decimal,
    ) -> DiscountValidation:
        user_pk = parse_uuid(user_id) if user_id else None

        try:
            result = await self.session.execute(
                select(func.validate_discount_code(code, user_pk, order_total))
            )
            data = result.scalar_one()
        except Exception as e:
            logger.error(f"Discount validation error: {e}", exc_info=True)
            return DiscountValidation(is_valid=False, error=self.FAILURE_MESSAGE)

        if isinstance(data, str):
            data = json.loads(data)
        if not isinstance(data, dict):
            logger.error(f"Unexpected discount validation response: {data!r}")
            return DiscountValidation(is_valid=False, error=self.FAILURE_MESSAGE)

        amount = data.get("discount_amount")
        return DiscountValidation(
            is_valid=bool(data.get("valid")),
            error=data.get("error"),
            discount_amount=Decimal(str(amount)) if amount is not None else None,
        )
