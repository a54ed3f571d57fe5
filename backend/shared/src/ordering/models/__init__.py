"""Pydantic models for the D818 ordering flow."""

from .enums import (
    CheckoutPaymentStatus,
    DeliveryOption,
    DeliveryStatus,
    NotificationChannel,
    WebhookResult,
)
from .cart import CartItem
from .errors import ERROR_MESSAGES, ErrorCode, ErrorResponse, OrderingError
from .metadata import (
    NOTIFICATIONS_SENT_KEY,
    NOTIFIED_ORDER_ID_KEY,
    OrderMetadata,
    parse_bool,
)
from .order import Customer, DeliveryDetails, Order, OrderItem
from .stripe_webhook import (
    CHECKOUT_SESSION_COMPLETED,
    CheckoutSession,
    LineItem,
    PaymentEvent,
)

__all__ = [
    # Enums
    "CheckoutPaymentStatus",
    "DeliveryOption",
    "DeliveryStatus",
    "NotificationChannel",
    "WebhookResult",
    # Cart
    "CartItem",
    # Errors
    "ERROR_MESSAGES",
    "ErrorCode",
    "ErrorResponse",
    "OrderingError",
    # Metadata
    "NOTIFICATIONS_SENT_KEY",
    "NOTIFIED_ORDER_ID_KEY",
    "OrderMetadata",
    "parse_bool",
    # Order
    "Customer",
    "DeliveryDetails",
    "Order",
    "OrderItem",
    # Stripe objects
    "CHECKOUT_SESSION_COMPLETED",
    "CheckoutSession",
    "LineItem",
    "PaymentEvent",
]
