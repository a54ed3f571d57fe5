"""Rebuilds an order summary from a paid Checkout Session.

Stripe is the source of truth: the session total is what the customer
paid, and the line items are the cart as Stripe priced it. Nothing here
raises on odd data; zero quantities, missing metadata and malformed totals
all degrade to safe values.
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal

from ordering.models.enums import CheckoutPaymentStatus, DeliveryOption
from ordering.models.metadata import OrderMetadata
from ordering.models.order import Customer, DeliveryDetails, Order, OrderItem
from ordering.models.stripe_webhook import CheckoutSession, LineItem
from ordering.utils.money import from_minor_units, round_amount

DELIVERY_FEE_DESCRIPTION = "delivery fee"
PAYMENT_METHOD = "stripe"


def is_delivery_fee(item: LineItem) -> bool:
    """Whether a line item is the delivery fee rather than a product.

    Matched on the description alone, ignoring case and surrounding space.
    """
    return item.description.strip().lower() == DELIVERY_FEE_DESCRIPTION


def _order_item(item: LineItem) -> OrderItem:
    quantity = 1 if item.quantity is None else item.quantity
    total = from_minor_units(item.amount_total)
    unit_price = total / quantity if quantity > 0 else total
    return OrderItem(
        name=item.description,
        quantity=quantity,
        price=float(round_amount(unit_price)),
    )


def reconstruct_order(
    session: CheckoutSession,
    line_items: Sequence[LineItem],
    *,
    now: datetime | None = None,
) -> Order:
    """Derive the order summary for a Checkout Session.

    Args:
        session: The paid Checkout Session.
        line_items: The session's line items, in Stripe's order.
        now: Timestamp to stamp on the order (defaults to the current time).

    Returns:
        The reconstructed Order.
    """
    metadata = OrderMetadata.from_stripe_metadata(session.metadata)

    fee_item = next((item for item in line_items if is_delivery_fee(item)), None)
    delivery_fee = from_minor_units(fee_item.amount_total) if fee_item else Decimal("0")
    total_paid = from_minor_units(session.amount_total)
    subtotal = max(Decimal("0"), total_paid - delivery_fee)

    items = [_order_item(item) for item in line_items if not is_delivery_fee(item)]

    email = session.customer_email or metadata.customer_email
    delivery_option = metadata.delivery_option

    delivery_details = None
    if delivery_option != DeliveryOption.COLLECTION:
        delivery_details = DeliveryDetails(
            address=metadata.address,
            postcode=metadata.postcode,
            notes=metadata.notes,
            phone=metadata.phone,
            email=email,
        )

    return Order(
        order_id=session.order_id or session.id or "unknown",
        user=Customer(
            name=metadata.customer_name or "Guest",
            phone=metadata.phone,
            email=email,
        ),
        items=items,
        delivery_option=delivery_option,
        delivery_details=delivery_details,
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        total=total_paid,
        within_radius=metadata.within_radius,
        payment_method=PAYMENT_METHOD,
        payment_id=session.payment_intent_id or session.id,
        payment_status=CheckoutPaymentStatus.PAID.value,
        timestamp=now or datetime.now(UTC),
    )
