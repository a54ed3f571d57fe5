"""Backend services for D818 online ordering."""

from .email_service import EmailService, EmailServiceError, get_email_service
from .idempotency import GuardDecision, NotificationGuard, get_notification_guard
from .messaging_service import MessagingService, MessagingServiceError, get_messaging_service
from .notification_ledger import NotificationLedger, NotificationLedgerError
from .notifier import DispatchReport, NotificationService, get_notification_service
from .order_reconstructor import reconstruct_order
from .orders_handler import OrdersHandler, get_orders_handler
from .password_reset import PasswordResetService, get_password_reset_service
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .stripe_service import (
    StripeService,
    StripeServiceError,
    WebhookSignatureError,
    get_stripe_service,
)
from .webhook_handler import WebhookHandler, WebhookOutcome, get_webhook_handler

__all__ = [
    "DispatchReport",
    "EmailService",
    "EmailServiceError",
    "get_email_service",
    "GuardDecision",
    "NotificationGuard",
    "get_notification_guard",
    "MessagingService",
    "MessagingServiceError",
    "get_messaging_service",
    "NotificationLedger",
    "NotificationLedgerError",
    "NotificationService",
    "get_notification_service",
    "reconstruct_order",
    "OrdersHandler",
    "get_orders_handler",
    "PasswordResetService",
    "get_password_reset_service",
    "SSMService",
    "SSMServiceError",
    "get_ssm_service",
    "StripeService",
    "StripeServiceError",
    "WebhookSignatureError",
    "get_stripe_service",
    "WebhookHandler",
    "WebhookOutcome",
    "get_webhook_handler",
]
