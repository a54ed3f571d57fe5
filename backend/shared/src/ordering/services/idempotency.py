"""Duplicate-notification guard keyed by Stripe payment intent.

The primary record is a ``notifications_sent`` flag in the payment intent's
own metadata. Reading then writing that flag is not atomic: two concurrent
deliveries of one event can both see "not sent". When a NotificationLedger
is configured, a conditional DynamoDB put closes that window by claiming
the payment intent before anything is sent.
"""

from functools import lru_cache

from pydantic import BaseModel

from ordering.config import get_settings
from ordering.models.metadata import NOTIFICATIONS_SENT_KEY, NOTIFIED_ORDER_ID_KEY, parse_bool
from ordering.utils.logging import get_logger

from .notification_ledger import NotificationLedger
from .stripe_service import StripeService, StripeServiceError, get_stripe_service

logger = get_logger(__name__)


class GuardDecision(BaseModel):
    """Result of checking one payment intent."""

    payment_intent_id: str | None = None
    already_sent: bool = False
    claimed: bool = False


class NotificationGuard:
    """Decides whether notifications for a payment were already dispatched."""

    def __init__(
        self,
        stripe_service: StripeService,
        ledger: NotificationLedger | None = None,
    ) -> None:
        self._stripe = stripe_service
        self._ledger = ledger

    def check(self, payment_intent_id: str | None, order_id: str | None = None) -> GuardDecision:
        """Check (and, with a ledger, claim) a payment intent.

        Without a payment intent there is nothing to key on, so the payment
        is treated as not yet notified.

        Raises:
            StripeServiceError: If the payment intent cannot be read.
            NotificationLedgerError: If the ledger cannot be written.
        """
        if not payment_intent_id:
            logger.warning("No payment intent for order %s; duplicate check skipped", order_id)
            return GuardDecision()

        metadata = self._stripe.get_payment_intent_metadata(payment_intent_id)
        if parse_bool(metadata.get(NOTIFICATIONS_SENT_KEY), default=False):
            logger.info("Notifications already sent for PaymentIntent %s", payment_intent_id)
            return GuardDecision(payment_intent_id=payment_intent_id, already_sent=True)

        claimed = False
        if self._ledger is not None:
            claimed = self._ledger.claim(payment_intent_id, order_id)
            if not claimed:
                return GuardDecision(payment_intent_id=payment_intent_id, already_sent=True)

        return GuardDecision(payment_intent_id=payment_intent_id, claimed=claimed)

    def mark_sent(self, decision: GuardDecision, order_id: str | None) -> None:
        """Set the flag on the payment intent.

        Only the flag keys are sent; Stripe merges them into the existing
        metadata.

        A failed write is logged, not raised: the emails are already out and
        re-delivery would duplicate them.
        """
        if not decision.payment_intent_id:
            return

        metadata = {
            NOTIFICATIONS_SENT_KEY: "true",
            NOTIFIED_ORDER_ID_KEY: str(order_id or ""),
        }
        try:
            self._stripe.update_payment_intent_metadata(decision.payment_intent_id, metadata)
        except StripeServiceError as e:
            logger.error(
                "Failed to mark PaymentIntent %s as notified: %s",
                decision.payment_intent_id,
                e,
            )

    def release(self, decision: GuardDecision) -> None:
        """Give back a ledger claim after a failed dispatch."""
        if self._ledger is not None and decision.claimed and decision.payment_intent_id:
            self._ledger.release(decision.payment_intent_id)


@lru_cache(maxsize=1)
def get_notification_guard() -> NotificationGuard:
    """Get the shared NotificationGuard, with a ledger when one is configured."""
    settings = get_settings()
    table_name = settings.notification_ledger_table
    ledger = (
        NotificationLedger(table_name, lease_seconds=settings.notification_claim_lease_seconds)
        if table_name
        else None
    )
    return NotificationGuard(get_stripe_service(), ledger)
