"""API routes package.

This package contains FastAPI routers for all REST API endpoints:

- checkout: Stripe Checkout session creation
- stripe: Session verification and the payment webhook
- orders: Notification dispatch for paid orders
- password: Password reset (placeholder)

All routers are registered in main.py with /api prefix.
"""

from ordering_api.routes.checkout import router as checkout_router
from ordering_api.routes.orders import router as orders_router
from ordering_api.routes.password import router as password_router
from ordering_api.routes.stripe import router as stripe_router

__all__ = [
    "checkout_router",
    "orders_router",
    "password_router",
    "stripe_router",
]
