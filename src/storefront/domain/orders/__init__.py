"""Order draft domain module."""

from .draft import (
    AuthenticatedOrderDraft,
    CartLine,
    CustomerInfo,
    DeliveryAddress,
    DraftKind,
    GuestOrderDraft,
    OrderDraft,
    OrderDraftBase,
)

__all__ = [
    "AuthenticatedOrderDraft",
    "CartLine",
    "CustomerInfo",
    "DeliveryAddress",
    "DraftKind",
    "GuestOrderDraft",
    "OrderDraft",
    "OrderDraftBase",
]
