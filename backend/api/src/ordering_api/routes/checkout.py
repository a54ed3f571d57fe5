"""Checkout endpoint: turns a storefront cart into a Stripe Checkout Session.

No authentication: the storefront calls this before the customer pays.
Amounts come from the request; Stripe is the source of truth for what
was actually charged.
"""

from fastapi import APIRouter, Depends

from ordering.config import Settings
from ordering.models.errors import ErrorCode, OrderingError
from ordering.models.metadata import OrderMetadata
from ordering.services.checkout_builder import build_line_items, build_redirect_urls
from ordering.services.stripe_service import StripeService, StripeServiceError
from ordering.utils.logging import get_logger
from ordering_api.dependencies import settings_dependency, stripe_service_dependency
from ordering_api.models.checkout import CheckoutSessionResponse, CreateCheckoutSessionRequest

logger = get_logger(__name__)

router = APIRouter(tags=["checkout"])


def build_checkout_metadata(body: CreateCheckoutSessionRequest) -> OrderMetadata:
    """Collect the order fields that the webhook later needs from the session."""
    details = body.delivery_details
    return OrderMetadata(
        order_id=body.order_id,
        customer_email=body.user.email,
        customer_name=body.user.name,
        phone=body.contact_phone,
        delivery_option=body.delivery_option,
        postcode=details.postcode if details else "",
        address=details.address if details else "",
        notes=details.notes if details else "",
        within_radius=body.within_radius,
    )


@router.post(
    "/create-checkout-session",
    summary="Create Stripe Checkout session",
    description="""
Create a Stripe Checkout Session for a cart and return the hosted payment page URL.

**Notes:**
- One priced line per cart item; a "Delivery fee" line when the fee is positive
- Unit amounts are rounded half up to whole pence
- Order details are stored in session metadata for the payment webhook
""",
    response_model=CheckoutSessionResponse,
    responses={
        200: {"description": "Checkout session created"},
        400: {"description": "Invalid cart (empty, zero quantity or price)"},
        500: {"description": "Stripe or configuration failure"},
    },
)
async def create_checkout_session(
    body: CreateCheckoutSessionRequest,
    settings: Settings = Depends(settings_dependency),
    stripe_service: StripeService = Depends(stripe_service_dependency),
) -> CheckoutSessionResponse:
    """Create a Checkout Session and return its URL."""
    if not settings.frontend_url:
        logger.error("FRONTEND_URL is not configured")
        raise OrderingError(
            ErrorCode.CONFIGURATION_ERROR,
            details={"setting": "FRONTEND_URL"},
        )

    success_url, cancel_url = build_redirect_urls(settings.frontend_url, body.order_id)
    try:
        session = stripe_service.create_checkout_session(
            order_id=body.order_id,
            line_items=build_line_items(body.items, body.delivery_fee, settings.currency),
            metadata=build_checkout_metadata(body).to_stripe_metadata(),
            success_url=success_url,
            cancel_url=cancel_url,
            description=f"{settings.brand_name} Order {body.order_id}",
            customer_email=body.user.email or None,
        )
    except StripeServiceError as e:
        raise OrderingError(
            ErrorCode.STRIPE_API_ERROR,
            details={"order_id": body.order_id, "stripe_error_code": e.stripe_error_code},
        ) from e

    return CheckoutSessionResponse(url=session["checkout_url"])
