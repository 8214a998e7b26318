"""PII masking for audit snapshots."""

from typing import Any, Optional

from ..domain.orders.draft import OrderDraft


def mask_email(email: Optional[str]) -> Optional[str]:
    """Keep the first two characters of the local part and the domain.

    >>> mask_email("johndoe@example.com")
    'jo*****@example.com'
    >>> mask_email("jo@x.com")
    'jo@x.com'
    """
    if not email:
        return email
    local, separator, domain = email.partition("@")
    masked_local = local[:2] + "*" * (len(local) - 2) if len(local) > 2 else local
    if not separator:
        return masked_local
    return f"{masked_local}@{domain}"


def mask_phone(phone: Optional[str]) -> Optional[str]:
    """Keep the first and last three characters, star the middle.

    Numbers of four characters or fewer are returned unchanged. For five or
    six characters nothing is starred and the kept ends do not overlap.

    >>> mask_phone("0123456789")
    '012****789'
    """
    if not phone or len(phone) <= 4:
        return phone
    length = len(phone)
    # Five or six characters: first three plus last three cover the whole number
    return phone[:3] + "*" * max(length - 6, 0) + phone[max(3, length - 3):]


def sanitize_order_data(draft: OrderDraft) -> dict[str, Any]:
    """Snapshot of a draft with customer email and phone numbers masked.

    Authenticated drafts carry only ids and are returned as-is.
    """
    snapshot = draft.to_snapshot()

    customer = snapshot.get("customer_info")
    if customer:
        customer["email"] = mask_email(customer.get("email"))
        customer["phone"] = mask_phone(customer.get("phone"))

    address = snapshot.get("address")
    if address:
        address["phone"] = mask_phone(address.get("phone"))

    return snapshot
