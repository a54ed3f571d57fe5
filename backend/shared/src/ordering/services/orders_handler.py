"""Notification dispatch for orders submitted by the storefront.

The storefront posts its own copy of the order after the Stripe redirect.
That copy is only trusted once the referenced Checkout Session is paid and
belongs to the same order for the same amount.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import BaseModel

from ordering.models.errors import ErrorCode, OrderingError
from ordering.models.order import Order
from ordering.models.stripe_webhook import CheckoutSession
from ordering.utils.logging import get_logger
from ordering.utils.money import from_minor_units, to_decimal

from .email_service import EmailServiceError
from .idempotency import NotificationGuard, get_notification_guard
from .notifier import NotificationService, get_notification_service
from .order_reconstructor import PAYMENT_METHOD
from .stripe_service import StripeService, get_stripe_service

logger = get_logger(__name__)

TOTAL_TOLERANCE = Decimal("0.01")


class OrdersOutcome(BaseModel):
    """Result of notifying one submitted order."""

    order: Order
    already_sent: bool = False


def verify_submitted_order(order: Order, session: CheckoutSession) -> Order:
    """Check a submitted order against its Checkout Session.

    Returns:
        A copy of the order stamped with Stripe payment fields.

    Raises:
        OrderingError: PAYMENT_NOT_CONFIRMED, ORDER_MISMATCH or TOTAL_MISMATCH.
    """
    if not session.is_paid:
        raise OrderingError(
            ErrorCode.PAYMENT_NOT_CONFIRMED,
            details={"payment_status": session.payment_status},
        )

    if session.client_reference_id and session.client_reference_id != order.order_id:
        raise OrderingError(
            ErrorCode.ORDER_MISMATCH,
            details={"order_id": order.order_id},
        )

    amount_paid = from_minor_units(session.amount_total)
    if abs(to_decimal(order.total) - amount_paid) > TOTAL_TOLERANCE:
        raise OrderingError(
            ErrorCode.TOTAL_MISMATCH,
            details={"order_total": order.total, "amount_paid": str(amount_paid)},
        )

    return order.model_copy(
        update={
            "payment_method": PAYMENT_METHOD,
            "payment_status": "paid",
            "payment_id": session.payment_intent_id or session.id,
        }
    )


class OrdersHandler:
    """Verifies a submitted order and sends its notifications."""

    def __init__(
        self,
        stripe_service: StripeService,
        notifier: NotificationService,
        guard: NotificationGuard,
    ) -> None:
        self._stripe = stripe_service
        self._notifier = notifier
        self._guard = guard

    def notify(self, order: Order, session_id: str) -> OrdersOutcome:
        """Verify payment, then email and WhatsApp the order.

        Notifications already sent for the same payment (by the webhook or
        an earlier submission) are not repeated.

        Raises:
            OrderingError: For verification failures, or EMAIL_DELIVERY_FAILED
                when the restaurant email fails.
            StripeServiceError: If Stripe cannot be read.
        """
        session = self._stripe.retrieve_session(session_id)
        verified = verify_submitted_order(order, session)

        decision = self._guard.check(session.payment_intent_id, verified.order_id)
        if decision.already_sent:
            logger.info("Order %s already notified; nothing sent", verified.order_id)
            return OrdersOutcome(order=verified, already_sent=True)

        try:
            report = self._notifier.dispatch_order_emails(verified)
        except EmailServiceError as e:
            self._guard.release(decision)
            raise OrderingError(
                ErrorCode.EMAIL_DELIVERY_FAILED,
                details={"order_id": verified.order_id},
            ) from e

        self._guard.mark_sent(decision, verified.order_id)
        channels = report.extend(self._notifier.send_order_whatsapp(verified)).summary()
        logger.info("Order %s notifications sent: %s", verified.order_id, channels, extra={"channels": channels})
        return OrdersOutcome(order=verified)


@lru_cache(maxsize=1)
def get_orders_handler() -> OrdersHandler:
    """Get the shared OrdersHandler instance."""
    return OrdersHandler(
        stripe_service=get_stripe_service(),
        notifier=get_notification_service(),
        guard=get_notification_guard(),
    )
