"""API-specific request/response models.

These models define request bodies and response schemas for endpoints.
Domain models (Order, CartItem, ErrorResponse) are in ordering.models
and are reused here where appropriate.

Modules:
- checkout: Checkout session creation and verification
- orders: Orders notify request/response
- password: Password reset request/response
- webhook: Stripe webhook acknowledgement
"""

from .checkout import CheckoutSessionResponse, CreateCheckoutSessionRequest, VerifySessionResponse
from .orders import OrderNotifyRequest, OrderNotifyResponse
from .password import PasswordResetRequest, PasswordResetResponse
from .webhook import WebhookResponse

__all__ = [
    "CheckoutSessionResponse",
    "CreateCheckoutSessionRequest",
    "OrderNotifyRequest",
    "OrderNotifyResponse",
    "PasswordResetRequest",
    "PasswordResetResponse",
    "VerifySessionResponse",
    "WebhookResponse",
]
