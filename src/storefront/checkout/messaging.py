"""WhatsApp hand-off messages for manual payment.

After an order is created the merchant arranges payment with the customer
over WhatsApp. These helpers render the two messages (order details for the
merchant, confirmation for the customer) and build ``wa.me`` links that open
a chat with the text pre-filled.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional
from urllib.parse import quote


@dataclass
class MessageItem:
    name: str
    price: Decimal
    quantity: int
    size: Optional[str] = None
    color: Optional[str] = None


@dataclass
class DeliveryContact:
    full_name: str
    street_address: str
    city: str
    province: str
    postal_code: str
    phone: str


@dataclass
class OrderMessageDetails:
    """Everything the two messages show about one order."""
    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    delivery_address: DeliveryContact
    delivery_method: str
    delivery_fee: Decimal
    subtotal: Decimal
    total: Decimal
    items: list[MessageItem] = field(default_factory=list)
    discount_amount: Decimal = Decimal("0")
    discount_code: Optional[str] = None


def _money(amount: Decimal, currency: str) -> str:
    return f"{currency} {Decimal(amount):.2f}"


def _display_delivery_method(method: str) -> str:
    """'courier_guy' -> 'Courier Guy'"""
    return re.sub(r"\b\w", lambda m: m.group().upper(), method.replace("_", " ", 1))


def _display_date(day: date) -> str:
    """'Monday, 19 October 2026'"""
    return f"{day:%A}, {day.day} {day:%B %Y}"


def format_merchant_order_message(
    details: OrderMessageDetails,
    currency: str = "R",
    order_date: Optional[date] = None,
) -> str:
    """Order details for the merchant, including the payment-required notice."""
    order_date = order_date or date.today()
    address = details.delivery_address

    lines = [
        "🛍️ *NEW ORDER RECEIVED* 🛍️",
        "",
        f"*Order Number:* {details.order_number}",
        f"*Date:* {_display_date(order_date)}",
        "",
        "👤 *CUSTOMER DETAILS*",
        f"*Name:* {details.customer_name}",
        f"*Email:* {details.customer_email}",
        f"*Phone:* {details.customer_phone}",
        "",
        "📍 *DELIVERY ADDRESS*",
        f"*Name:* {address.full_name}",
        f"*Address:* {address.street_address}",
        f"*City:* {address.city}",
        f"*Province:* {address.province}",
        f"*Postal Code:* {address.postal_code}",
        f"*Phone:* {address.phone}",
        "",
        "🚚 *DELIVERY METHOD*",
        f"*Method:* {_display_delivery_method(details.delivery_method)}",
        f"*Delivery Fee:* {_money(details.delivery_fee, currency)}",
        "",
        "🛒 *ORDER ITEMS*",
    ]

    for index, item in enumerate(details.items, start=1):
        lines.append(f"{index}. *{item.name}*")
        lines.append(f"   Price: {_money(item.price, currency)} x {item.quantity}")
        lines.append(f"   Total: {_money(Decimal(item.price) * item.quantity, currency)}")
        if item.size:
            lines.append(f"   Size: {item.size}")
        if item.color:
            lines.append(f"   Color: {item.color}")

    lines += [
        "",
        "💰 *ORDER SUMMARY*",
        f"*Subtotal:* {_money(details.subtotal, currency)}",
        f"*Delivery:* {_money(details.delivery_fee, currency)}",
    ]
    if details.discount_amount and details.discount_amount > 0:
        lines.append(f"*Discount ({details.discount_code}):* -{_money(details.discount_amount, currency)}")

    lines += [
        f"*TOTAL:* {_money(details.total, currency)}",
        "",
        "⚠️ *PAYMENT REQUIRED*",
        "Please contact the customer to arrange payment via:",
        "• Bank transfer details",
        "• Card payment link from your phone",
        "• Cash on delivery (if applicable)",
        "",
        "Once payment is confirmed, update the order status in the admin panel.",
        "",
        f"Customer contact: {details.customer_phone}",
        f"Customer email: {details.customer_email}",
    ]
    return "\n".join(lines)


def format_customer_confirmation(
    details: OrderMessageDetails,
    store_name: str,
    app_url: str,
    currency: str = "R",
) -> str:
    """Confirmation for the customer with next steps for payment."""
    lines = [
        f"Hi {details.customer_name}! 🎉",
        "",
        f"Thank you for your order with {store_name}! ✨",
        "",
        f"*Order Number:* {details.order_number}",
        f"*Total Amount:* {_money(details.total, currency)}",
        "",
        "*Your Items:*",
    ]
    for index, item in enumerate(details.items, start=1):
        lines.append(f"{index}. {item.name} (Qty: {item.quantity})")

    lines += [
        "",
        "📞 *NEXT STEPS*",
        f"{store_name} will contact you shortly via WhatsApp to arrange payment. You can pay via:",
        "• Bank transfer (details will be shared)",
        "• Card payment link",
        "• Cash on delivery (where available)",
        "",
        "Your order will be processed once payment is confirmed.",
        "",
        f"Track your order: {app_url.rstrip('/')}/account/orders",
        "",
        f"Thank you for choosing {store_name}! 💕",
        "",
        f"- {store_name} Team",
    ]
    return "\n".join(lines)


def whatsapp_link(phone_number: str, message: Optional[str] = None) -> str:
    """wa.me link for a phone number (digits only), optionally pre-filled.

    >>> whatsapp_link("+27 63 400 9626")
    'https://wa.me/27634009626'
    """
    digits = re.sub(r"\D", "", phone_number)
    url = f"https://wa.me/{digits}"
    if message:
        url += f"?text={quote(message)}"
    return url
