"""Builds Stripe Checkout parameters from a storefront cart."""

from collections.abc import Sequence
from decimal import Decimal
from urllib.parse import quote

from ordering.models.cart import CartItem
from ordering.utils.money import to_minor_units

DELIVERY_FEE_NAME = "Delivery fee"


def _price_line(name: str, quantity: int, amount: Decimal, currency: str) -> dict:
    return {
        "quantity": quantity,
        "price_data": {
            "currency": currency,
            "unit_amount": to_minor_units(amount),
            "product_data": {"name": name},
        },
    }


def build_line_items(
    items: Sequence[CartItem],
    delivery_fee: Decimal | None,
    currency: str,
) -> list[dict]:
    """Build the Stripe line_items parameter.

    One priced line per cart item, plus a "Delivery fee" line when the fee
    is positive. Unit amounts are rounded half up to whole pence.

    Args:
        items: Validated cart items (positive quantity and price).
        delivery_fee: Delivery fee in pounds, if any.
        currency: ISO currency code in lower case.

    Returns:
        List of line item dicts for checkout.sessions.create.
    """
    line_items = [_price_line(item.name, item.quantity, item.price, currency) for item in items]
    if delivery_fee is not None and delivery_fee > 0:
        line_items.append(_price_line(DELIVERY_FEE_NAME, 1, delivery_fee, currency))
    return line_items


def build_redirect_urls(frontend_url: str, order_id: str) -> tuple[str, str]:
    """Build the success and cancel URLs for a Checkout Session.

    Returns:
        Tuple of (success_url, cancel_url). The success URL keeps Stripe's
        {CHECKOUT_SESSION_ID} placeholder.
    """
    base = frontend_url.rstrip("/")
    encoded_order_id = quote(order_id, safe="")
    success_url = f"{base}/success?session_id={{CHECKOUT_SESSION_ID}}&orderId={encoded_order_id}"
    cancel_url = f"{base}/?payment=cancelled&orderId={encoded_order_id}"
    return success_url, cancel_url
