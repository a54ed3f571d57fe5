"""Order notification fan-out.

Channels are dispatched one at a time in a fixed order: restaurant email,
customer email, then WhatsApp. Only the restaurant email is required; it
raises on failure. Every other channel is skipped when it has no recipient
and logged (not raised) when it fails.
"""

from functools import lru_cache

from pydantic import BaseModel, Field

from ordering.config import Settings, get_settings
from ordering.models.enums import DeliveryStatus, NotificationChannel
from ordering.models.order import Order
from ordering.utils.logging import get_logger, log_notification

from .email_service import EmailService, EmailServiceError, get_email_service
from .messaging_service import MessagingService, MessagingServiceError, get_messaging_service
from .templates import render

logger = get_logger(__name__)


class DispatchReport(BaseModel):
    """Per-channel outcome of one fan-out."""

    channels: dict[NotificationChannel, DeliveryStatus] = Field(default_factory=dict)

    def record(self, channel: NotificationChannel, status: DeliveryStatus) -> None:
        self.channels[channel] = status

    def status(self, channel: NotificationChannel) -> DeliveryStatus | None:
        return self.channels.get(channel)

    def extend(self, other: "DispatchReport") -> "DispatchReport":
        self.channels.update(other.channels)
        return self

    def summary(self) -> dict[str, str]:
        """Channel name to status, for log context."""
        return {channel.value: status.value for channel, status in self.channels.items()}


class NotificationService:
    """Sends order notifications to the restaurant and the customer."""

    def __init__(
        self,
        email: EmailService,
        messaging: MessagingService,
        settings: Settings | None = None,
    ) -> None:
        self._email = email
        self._messaging = messaging
        self._settings = settings or get_settings()

    def send_restaurant_email(self, order: Order) -> None:
        """Email the new order to the restaurant.

        Raises:
            EmailServiceError: If the email is not accepted.
        """
        recipient = self._settings.restaurant_email
        try:
            self._email.send(
                sender=self._settings.orders_from_email,
                to=recipient,
                reply_to=order.user.email or None,
                subject=f"New Order: {order.order_id}",
                html=render("restaurant_order.html", order=order),
            )
        except EmailServiceError as e:
            log_notification(
                logger,
                NotificationChannel.RESTAURANT_EMAIL.value,
                order_id=order.order_id,
                recipient=recipient,
                result=DeliveryStatus.FAILED.value,
                error=str(e),
            )
            raise
        log_notification(
            logger,
            NotificationChannel.RESTAURANT_EMAIL.value,
            order_id=order.order_id,
            recipient=recipient,
            result=DeliveryStatus.SENT.value,
        )

    def send_customer_email(self, order: Order) -> DeliveryStatus:
        """Email the order confirmation to the customer, if they gave an email."""
        channel = NotificationChannel.CUSTOMER_EMAIL.value
        if not order.user.email:
            log_notification(logger, channel, order_id=order.order_id, result=DeliveryStatus.SKIPPED.value)
            return DeliveryStatus.SKIPPED

        try:
            self._email.send(
                sender=self._settings.customer_from_email,
                to=order.user.email,
                reply_to=self._settings.restaurant_email,
                subject=f"Order Confirmation - {order.order_id}",
                html=render("customer_order.html", order=order),
            )
        except EmailServiceError as e:
            log_notification(
                logger,
                channel,
                order_id=order.order_id,
                recipient=order.user.email,
                result=DeliveryStatus.FAILED.value,
                error=str(e),
            )
            return DeliveryStatus.FAILED

        log_notification(
            logger, channel, order_id=order.order_id, recipient=order.user.email, result=DeliveryStatus.SENT.value
        )
        return DeliveryStatus.SENT

    def dispatch_order_emails(self, order: Order) -> DispatchReport:
        """Send the restaurant email, then the customer email.

        Raises:
            EmailServiceError: If the restaurant email fails. The customer
                email is not attempted in that case.
        """
        report = DispatchReport()
        self.send_restaurant_email(order)
        report.record(NotificationChannel.RESTAURANT_EMAIL, DeliveryStatus.SENT)
        report.record(NotificationChannel.CUSTOMER_EMAIL, self.send_customer_email(order))
        return report

    def _send_whatsapp(
        self,
        channel: NotificationChannel,
        recipient: str | None,
        body: str,
        order_id: str,
    ) -> DeliveryStatus:
        try:
            configured = self._messaging.is_configured()
        except MessagingServiceError as e:
            log_notification(
                logger, channel.value, order_id=order_id, result=DeliveryStatus.FAILED.value, error=str(e)
            )
            return DeliveryStatus.FAILED

        if not recipient or not configured:
            log_notification(
                logger,
                channel.value,
                order_id=order_id,
                result=DeliveryStatus.SKIPPED.value,
                reason="no recipient" if not recipient else "messaging not configured",
            )
            return DeliveryStatus.SKIPPED

        try:
            self._messaging.send(recipient, body)
        except MessagingServiceError as e:
            log_notification(
                logger,
                channel.value,
                order_id=order_id,
                recipient=recipient,
                result=DeliveryStatus.FAILED.value,
                error=str(e),
            )
            return DeliveryStatus.FAILED

        log_notification(
            logger, channel.value, order_id=order_id, recipient=recipient, result=DeliveryStatus.SENT.value
        )
        return DeliveryStatus.SENT

    def send_payment_confirmation(self, order_id: str, amount: str) -> DeliveryStatus:
        """WhatsApp the restaurant that a payment cleared.

        Args:
            order_id: Storefront order ID.
            amount: Amount paid, formatted to two decimal places.
        """
        return self._send_whatsapp(
            NotificationChannel.PAYMENT_CONFIRMATION,
            self._settings.restaurant_whatsapp_number,
            render("payment_confirmation.txt", order_id=order_id, amount=amount),
            order_id,
        )

    def send_order_whatsapp(self, order: Order) -> DispatchReport:
        """WhatsApp the full order to the restaurant and a confirmation to the customer."""
        report = DispatchReport()
        report.record(
            NotificationChannel.RESTAURANT_WHATSAPP,
            self._send_whatsapp(
                NotificationChannel.RESTAURANT_WHATSAPP,
                self._settings.restaurant_whatsapp_number,
                render("restaurant_order_whatsapp.txt", order=order),
                order.order_id,
            ),
        )
        report.record(
            NotificationChannel.CUSTOMER_WHATSAPP,
            self._send_whatsapp(
                NotificationChannel.CUSTOMER_WHATSAPP,
                order.user.phone,
                render("customer_order_whatsapp.txt", order=order),
                order.order_id,
            ),
        )
        return report


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    """Get the shared NotificationService instance."""
    return NotificationService(email=get_email_service(), messaging=get_messaging_service())
