"""Enumeration types for D818 ordering models."""

from enum import Enum


class DeliveryOption(str, Enum):
    """How an order reaches the customer."""

    COLLECTION = "collection"
    DELIVERY = "delivery"
    UBER = "uber"

    @classmethod
    def normalize(cls, value: object) -> "DeliveryOption":
        """Map any input onto a known option, defaulting to collection.

        Args:
            value: Raw value from a request body or Stripe metadata.

        Returns:
            The matching DeliveryOption, or COLLECTION when unrecognised.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.COLLECTION


class CheckoutPaymentStatus(str, Enum):
    """Stripe Checkout Session payment_status values."""

    PAID = "paid"
    UNPAID = "unpaid"
    NO_PAYMENT_REQUIRED = "no_payment_required"


class WebhookResult(str, Enum):
    """Outcome of processing one webhook event."""

    SUCCESS = "success"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    IGNORED = "ignored"


class NotificationChannel(str, Enum):
    """Notification delivery channels."""

    RESTAURANT_EMAIL = "restaurant_email"
    CUSTOMER_EMAIL = "customer_email"
    RESTAURANT_WHATSAPP = "restaurant_whatsapp"
    CUSTOMER_WHATSAPP = "customer_whatsapp"
    PAYMENT_CONFIRMATION = "payment_confirmation"


class DeliveryStatus(str, Enum):
    """Per-channel dispatch status."""

    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"
