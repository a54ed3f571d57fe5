"""FastAPI dependency providers for shared services.

Routes receive services through Depends() so tests can swap them with
app.dependency_overrides.

Service Dependency Graph:
    StripeService
        ├── NotificationGuard (+ optional NotificationLedger)
        ├── WebhookHandler ── NotificationService ── EmailService, MessagingService
        └── OrdersHandler ─── NotificationService
    PasswordResetService ── EmailService

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from ordering.config import Settings, get_settings, reset_settings
from ordering.services.email_service import get_email_service
from ordering.services.idempotency import get_notification_guard
from ordering.services.messaging_service import get_messaging_service
from ordering.services.notifier import get_notification_service
from ordering.services.orders_handler import OrdersHandler, get_orders_handler
from ordering.services.password_reset import PasswordResetService, get_password_reset_service
from ordering.services.ssm_service import SSMService, get_ssm_service
from ordering.services.stripe_service import StripeService, get_stripe_service
from ordering.services.templates import get_environment
from ordering.services.webhook_handler import WebhookHandler, get_webhook_handler


def settings_dependency() -> Settings:
    return get_settings()


def stripe_service_dependency() -> StripeService:
    return get_stripe_service()


def webhook_handler_dependency() -> WebhookHandler:
    return get_webhook_handler()


def orders_handler_dependency() -> OrdersHandler:
    return get_orders_handler()


def password_reset_dependency() -> PasswordResetService:
    return get_password_reset_service()


def reset_services() -> None:
    """Clear all cached service instances and settings.

    Example:
        @pytest.fixture(autouse=True)
        def reset_state():
            yield
            reset_services()
    """
    for factory in (
        get_webhook_handler,
        get_orders_handler,
        get_password_reset_service,
        get_notification_guard,
        get_notification_service,
        get_messaging_service,
        get_email_service,
        get_stripe_service,
        get_ssm_service,
        get_environment,
    ):
        factory.cache_clear()
    SSMService.clear_cache()
    reset_settings()
