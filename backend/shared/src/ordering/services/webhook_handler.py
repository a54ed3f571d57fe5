"""Webhook handler for processing Stripe events.

Provides the payment-confirmation logic separate from HTTP routing
concerns, so it can be unit tested without a request.

Processing of one verified event:

    not checkout.session.completed     -> ignored
    payment_status != "paid"           -> skipped, no side effects
    notifications already sent         -> duplicate, payment confirmation only
    otherwise                          -> order emails, mark sent,
                                          payment confirmation -> success

The payment confirmation WhatsApp goes out for every paid completion,
duplicates included; only the emails are de-duplicated.
"""

from functools import lru_cache

from pydantic import BaseModel

from ordering.models.enums import NotificationChannel, WebhookResult
from ordering.models.errors import ErrorCode, OrderingError
from ordering.models.stripe_webhook import PaymentEvent
from ordering.utils.logging import get_logger, log_webhook_event
from ordering.utils.money import format_amount, from_minor_units

from .email_service import EmailServiceError
from .idempotency import NotificationGuard, get_notification_guard
from .notifier import NotificationService, get_notification_service
from .order_reconstructor import reconstruct_order
from .stripe_service import StripeService, get_stripe_service

logger = get_logger(__name__)


class WebhookOutcome(BaseModel):
    """What happened to one event."""

    result: WebhookResult
    order_id: str | None = None
    message: str | None = None


class WebhookHandler:
    """Handler for processing Stripe webhook events."""

    def __init__(
        self,
        stripe_service: StripeService,
        notifier: NotificationService,
        guard: NotificationGuard,
    ) -> None:
        self._stripe = stripe_service
        self._notifier = notifier
        self._guard = guard

    def process_event(self, event: PaymentEvent) -> WebhookOutcome:
        """Process a verified webhook event.

        Args:
            event: Event returned by signature verification.

        Returns:
            WebhookOutcome describing the processing result.

        Raises:
            OrderingError: If the restaurant email cannot be sent.
            StripeServiceError: If Stripe cannot be read.
            NotificationLedgerError: If the claim ledger is unavailable.
        """
        if not event.is_checkout_completed:
            log_webhook_event(logger, event.type, event.id, result=WebhookResult.IGNORED.value)
            return WebhookOutcome(
                result=WebhookResult.IGNORED,
                message=f"Event type '{event.type}' not handled",
            )
        return self.process_checkout_completed(event)

    def process_checkout_completed(self, event: PaymentEvent) -> WebhookOutcome:
        """Process a checkout.session.completed event."""
        session = event.checkout_session()
        order_id = session.order_id
        payment_intent_id = session.payment_intent_id

        if not session.is_paid:
            message = f"Payment status is '{session.payment_status}', not 'paid'"
            log_webhook_event(
                logger,
                event.type,
                event.id,
                order_id=order_id,
                result=WebhookResult.SKIPPED.value,
                payment_status=session.payment_status,
            )
            return WebhookOutcome(result=WebhookResult.SKIPPED, order_id=order_id, message=message)

        amount_paid = format_amount(from_minor_units(session.amount_total))

        decision = self._guard.check(payment_intent_id, order_id)
        if decision.already_sent:
            self._notifier.send_payment_confirmation(order_id or session.id, amount_paid)
            log_webhook_event(
                logger,
                event.type,
                event.id,
                order_id=order_id,
                payment_intent_id=payment_intent_id,
                result=WebhookResult.DUPLICATE.value,
            )
            return WebhookOutcome(
                result=WebhookResult.DUPLICATE,
                order_id=order_id,
                message="Notifications already sent",
            )

        try:
            line_items = self._stripe.list_line_items(session.id)
            order = reconstruct_order(session, line_items)
            report = self._notifier.dispatch_order_emails(order)
        except EmailServiceError as e:
            self._guard.release(decision)
            log_webhook_event(
                logger,
                event.type,
                event.id,
                order_id=order_id,
                payment_intent_id=payment_intent_id,
                result="error",
                error=str(e),
            )
            raise OrderingError(
                ErrorCode.EMAIL_DELIVERY_FAILED,
                details={"order_id": order_id or ""},
            ) from e
        except Exception:
            self._guard.release(decision)
            raise

        self._guard.mark_sent(decision, order.order_id)
        report.record(
            NotificationChannel.PAYMENT_CONFIRMATION,
            self._notifier.send_payment_confirmation(order.order_id, order.total),
        )

        log_webhook_event(
            logger,
            event.type,
            event.id,
            order_id=order.order_id,
            payment_intent_id=payment_intent_id,
            result=WebhookResult.SUCCESS.value,
            items=len(order.items),
            total=order.total,
            channels=report.summary(),
        )
        return WebhookOutcome(result=WebhookResult.SUCCESS, order_id=order.order_id)


@lru_cache(maxsize=1)
def get_webhook_handler() -> WebhookHandler:
    """Get the shared WebhookHandler instance."""
    return WebhookHandler(
        stripe_service=get_stripe_service(),
        notifier=get_notification_service(),
        guard=get_notification_guard(),
    )
