"""Unit tests for WebhookHandler.

Tests the payment-confirmation flow with Stripe, the notifier and the
guard mocked:

    ignored -> skipped (not paid) -> duplicate (confirmation only) -> success
"""

import logging
from unittest.mock import MagicMock

import pytest

from ordering.models.enums import DeliveryStatus, NotificationChannel, WebhookResult
from ordering.models.errors import ErrorCode, OrderingError
from ordering.models.stripe_webhook import PaymentEvent
from ordering.services.email_service import EmailServiceError
from ordering.services.idempotency import GuardDecision, NotificationGuard
from ordering.services.notifier import DispatchReport, NotificationService
from ordering.services.stripe_service import StripeServiceError
from ordering.services.webhook_handler import WebhookHandler

TEST_PI = "pi_3TestPaymentIntent"
TEST_ORDER_ID = "D818-1700000000000"


@pytest.fixture
def mock_notifier() -> MagicMock:
    notifier = MagicMock(spec=NotificationService)
    notifier.dispatch_order_emails.return_value = DispatchReport(
        channels={
            NotificationChannel.RESTAURANT_EMAIL: DeliveryStatus.SENT,
            NotificationChannel.CUSTOMER_EMAIL: DeliveryStatus.SKIPPED,
        }
    )
    notifier.send_payment_confirmation.return_value = DeliveryStatus.SENT
    return notifier


@pytest.fixture
def mock_guard() -> MagicMock:
    guard = MagicMock(spec=NotificationGuard)
    guard.check.return_value = GuardDecision(payment_intent_id=TEST_PI)
    return guard


@pytest.fixture
def handler(mock_stripe_service, mock_notifier, mock_guard) -> WebhookHandler:
    return WebhookHandler(stripe_service=mock_stripe_service, notifier=mock_notifier, guard=mock_guard)


@pytest.fixture
def completed_event(checkout_completed_payload) -> PaymentEvent:
    return PaymentEvent.from_stripe(checkout_completed_payload)


class TestEventRouting:
    def test_other_event_types_ignored(self, handler, mock_notifier, mock_guard):
        event = PaymentEvent(id="evt_1", type="payment_intent.created", data_object={"id": TEST_PI})

        outcome = handler.process_event(event)

        assert outcome.result == WebhookResult.IGNORED
        assert "payment_intent.created" in outcome.message
        mock_guard.check.assert_not_called()
        mock_notifier.send_payment_confirmation.assert_not_called()

    @pytest.mark.parametrize("payment_status", ["unpaid", "no_payment_required"])
    def test_unpaid_session_skipped_without_side_effects(
        self, handler, checkout_completed_payload, mock_stripe_service, mock_notifier, mock_guard, payment_status
    ):
        checkout_completed_payload["data"]["object"]["payment_status"] = payment_status
        event = PaymentEvent.from_stripe(checkout_completed_payload)

        outcome = handler.process_event(event)

        assert outcome.result == WebhookResult.SKIPPED
        assert outcome.order_id == TEST_ORDER_ID
        mock_guard.check.assert_not_called()
        mock_stripe_service.list_line_items.assert_not_called()
        mock_notifier.dispatch_order_emails.assert_not_called()
        mock_notifier.send_payment_confirmation.assert_not_called()


class TestFirstDelivery:
    def test_full_fan_out(self, handler, completed_event, mock_stripe_service, mock_notifier, mock_guard):
        outcome = handler.process_event(completed_event)

        assert outcome.result == WebhookResult.SUCCESS
        assert outcome.order_id == TEST_ORDER_ID
        mock_guard.check.assert_called_once_with(TEST_PI, TEST_ORDER_ID)
        mock_stripe_service.list_line_items.assert_called_once_with("cs_test_a1b2c3")

        order = mock_notifier.dispatch_order_emails.call_args.args[0]
        assert order.order_id == TEST_ORDER_ID
        assert (order.subtotal, order.delivery_fee, order.total) == ("22.00", "3.50", "25.50")
        assert order.user.email == "ada@example.com"

        mock_guard.mark_sent.assert_called_once_with(mock_guard.check.return_value, TEST_ORDER_ID)
        mock_notifier.send_payment_confirmation.assert_called_once_with(TEST_ORDER_ID, "25.50")

    def test_flag_written_after_emails_and_before_confirmation(self, handler, completed_event, mock_notifier, mock_guard):
        calls = MagicMock()
        calls.attach_mock(mock_notifier.dispatch_order_emails, "emails")
        calls.attach_mock(mock_guard.mark_sent, "mark_sent")
        calls.attach_mock(mock_notifier.send_payment_confirmation, "confirmation")

        handler.process_event(completed_event)

        assert [c[0] for c in calls.mock_calls] == ["emails", "mark_sent", "confirmation"]

    def test_channel_outcomes_logged(self, handler, completed_event, caplog):
        caplog.set_level(logging.INFO)

        handler.process_event(completed_event)

        (record,) = [r for r in caplog.records if getattr(r, "channels", None)]
        assert record.channels == {
            "restaurant_email": "sent",
            "customer_email": "skipped",
            "payment_confirmation": "sent",
        }

    def test_restaurant_email_failure(self, handler, completed_event, mock_notifier, mock_guard):
        mock_notifier.dispatch_order_emails.side_effect = EmailServiceError("Resend down", status_code=503)

        with pytest.raises(OrderingError) as exc_info:
            handler.process_event(completed_event)

        assert exc_info.value.code == ErrorCode.EMAIL_DELIVERY_FAILED
        mock_guard.release.assert_called_once_with(mock_guard.check.return_value)
        mock_guard.mark_sent.assert_not_called()
        mock_notifier.send_payment_confirmation.assert_not_called()

    def test_line_item_failure_releases_claim(self, handler, completed_event, mock_stripe_service, mock_guard):
        mock_stripe_service.list_line_items.side_effect = StripeServiceError("timeout")

        with pytest.raises(StripeServiceError):
            handler.process_event(completed_event)

        mock_guard.release.assert_called_once()
        mock_guard.mark_sent.assert_not_called()


class TestDuplicateDelivery:
    def test_confirmation_only(self, handler, completed_event, mock_stripe_service, mock_notifier, mock_guard):
        mock_guard.check.return_value = GuardDecision(payment_intent_id=TEST_PI, already_sent=True)

        outcome = handler.process_event(completed_event)

        assert outcome.result == WebhookResult.DUPLICATE
        mock_stripe_service.list_line_items.assert_not_called()
        mock_notifier.dispatch_order_emails.assert_not_called()
        mock_guard.mark_sent.assert_not_called()
        mock_notifier.send_payment_confirmation.assert_called_once_with(TEST_ORDER_ID, "25.50")

    def test_retry_sends_one_email_pair(self, mock_stripe_service, mock_notifier, line_items, completed_event):
        """Two deliveries of one event: emails once, confirmation twice."""
        metadata: dict[str, str] = {}
        mock_stripe_service.get_payment_intent_metadata.side_effect = lambda pi: dict(metadata)
        mock_stripe_service.update_payment_intent_metadata.side_effect = lambda pi, md: metadata.update(md)
        handler = WebhookHandler(mock_stripe_service, mock_notifier, NotificationGuard(mock_stripe_service))

        first = handler.process_event(completed_event)
        second = handler.process_event(completed_event)

        assert (first.result, second.result) == (WebhookResult.SUCCESS, WebhookResult.DUPLICATE)
        assert mock_notifier.dispatch_order_emails.call_count == 1
        assert mock_notifier.send_payment_confirmation.call_count == 2
        assert metadata["notifications_sent"] == "true"
