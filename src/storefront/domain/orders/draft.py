"""Order drafts: the in-memory representation of a prospective order.

A draft exists only for the duration of a checkout attempt. It is either a
guest draft (contact and address captured inline) or an authenticated draft
(user id and saved address id). The variant is carried by an explicit
``kind`` tag so no code has to probe for the presence of fields.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union


class DraftKind(str, Enum):
    """Discriminator for the two draft variants."""
    GUEST = "guest"
    AUTHENTICATED = "authenticated"


@dataclass
class CartLine:
    """One cart line as captured client-side (price may be stale)."""
    product_id: str
    quantity: int
    price: Decimal
    size: Optional[str] = None
    color: Optional[str] = None


@dataclass
class CustomerInfo:
    full_name: str
    email: str
    phone: str


@dataclass
class DeliveryAddress:
    street_address: str
    city: str
    province: str
    postal_code: str
    phone: str = ""


@dataclass(kw_only=True)
class OrderDraftBase:
    """Fields shared by both draft variants."""
    cart_items: list[CartLine] = field(default_factory=list)
    delivery_method: str = ""
    delivery_fee: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    discount_code: Optional[str] = None
    discount_amount: Decimal = Decimal("0")

    @property
    def expected_total(self) -> Decimal:
        """subtotal + delivery fee - discount."""
        return self.subtotal + self.delivery_fee - (self.discount_amount or Decimal("0"))

    def to_snapshot(self) -> dict[str, Any]:
        """JSON-safe dictionary of the draft (amounts as floats)."""
        snapshot = {
            "kind": self.kind.value,
            "cart_items": [
                {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price": float(item.price),
                    "size": item.size,
                    "color": item.color,
                }
                for item in self.cart_items
            ],
            "delivery_method": self.delivery_method,
            "delivery_fee": float(self.delivery_fee),
            "subtotal": float(self.subtotal),
            "discount_code": self.discount_code,
            "discount_amount": float(self.discount_amount or 0),
            "total": float(self.total),
        }
        snapshot.update(self._variant_snapshot())
        return snapshot

    def _variant_snapshot(self) -> dict[str, Any]:
        return {}


@dataclass(kw_only=True)
class GuestOrderDraft(OrderDraftBase):
    """Draft placed without an authenticated identity."""
    customer_info: CustomerInfo
    address: DeliveryAddress
    kind: DraftKind = field(default=DraftKind.GUEST, init=False)

    @property
    def user_id(self) -> Optional[str]:
        return None

    def _variant_snapshot(self) -> dict[str, Any]:
        return {
            "customer_info": {
                "full_name": self.customer_info.full_name,
                "email": self.customer_info.email,
                "phone": self.customer_info.phone,
            },
            "address": {
                "street_address": self.address.street_address,
                "city": self.address.city,
                "province": self.address.province,
                "postal_code": self.address.postal_code,
                "phone": self.address.phone,
            },
        }


@dataclass(kw_only=True)
class AuthenticatedOrderDraft(OrderDraftBase):
    """Draft placed by a signed-in customer against a saved address."""
    user_id: str
    address_id: str
    kind: DraftKind = field(default=DraftKind.AUTHENTICATED, init=False)

    def _variant_snapshot(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "address_id": self.address_id}


OrderDraft = Union[GuestOrderDraft, AuthenticatedOrderDraft]
