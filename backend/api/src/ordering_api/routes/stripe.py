"""Stripe endpoints: session verification and the payment webhook.

The webhook does NOT require authentication; it receives payloads signed
with the Stripe webhook secret and verifies them before doing anything.
"""

from fastapi import APIRouter, Depends, Request

from ordering.models.errors import ErrorCode, OrderingError
from ordering.services.stripe_service import (
    StripeService,
    StripeServiceError,
    WebhookSignatureError,
)
from ordering.services.webhook_handler import WebhookHandler
from ordering.utils.logging import get_logger, log_webhook_event
from ordering.utils.money import from_minor_units
from ordering_api.dependencies import stripe_service_dependency, webhook_handler_dependency
from ordering_api.models.checkout import VerifySessionResponse
from ordering_api.models.webhook import WebhookResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/stripe", tags=["stripe"])


@router.get(
    "/verify-session",
    summary="Verify a Checkout Session",
    description="Report whether a Checkout Session is paid, with the amount charged in pounds.",
    response_model=VerifySessionResponse,
    responses={
        200: {"description": "Session found"},
        400: {"description": "session_id missing"},
        500: {"description": "Session could not be retrieved"},
    },
)
async def verify_session(
    session_id: str | None = None,
    stripe_service: StripeService = Depends(stripe_service_dependency),
) -> VerifySessionResponse:
    """Read-only lookup of a Checkout Session."""
    if not session_id:
        raise OrderingError(ErrorCode.INVALID_INPUT, details={"field": "session_id"})

    try:
        session = stripe_service.retrieve_session(session_id)
    except StripeServiceError as e:
        logger.error("Failed to verify session %s: %s", session_id, e)
        raise OrderingError(ErrorCode.SESSION_VERIFICATION_FAILED) from e

    return VerifySessionResponse(
        paid=session.is_paid,
        amount_total=float(from_minor_units(session.amount_total)),
        order_id=session.order_id,
    )


@router.post(
    "/webhook",
    summary="Receive Stripe webhook events",
    description="""
Endpoint for Stripe webhook events. Handles checkout.session.completed:
emails the order to the restaurant and customer, then sends the payment
confirmation WhatsApp.

**No authentication required** - signature is verified using the Stripe webhook secret.

**Idempotent**: notifications already sent for a payment intent are not
repeated; the response reports `duplicate`.
""",
    response_model=WebhookResponse,
    responses={
        200: {"description": "Event received and processed (or acknowledged)"},
        400: {"description": "Invalid signature or missing header"},
        500: {"description": "Required notification failed; Stripe will retry"},
    },
)
async def handle_stripe_webhook(
    request: Request,
    stripe_service: StripeService = Depends(stripe_service_dependency),
    handler: WebhookHandler = Depends(webhook_handler_dependency),
) -> WebhookResponse:
    """Verify the signature on the raw body, then process the event."""
    signature = request.headers.get("Stripe-Signature")
    if not signature:
        logger.warning("Webhook request missing Stripe-Signature header")
        raise OrderingError(
            ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            details={"message": "Missing Stripe-Signature header"},
        )

    # Raw bytes: the signature covers the unparsed body
    payload = await request.body()

    try:
        event = stripe_service.verify_webhook_signature(payload, signature)
    except WebhookSignatureError as e:
        raise OrderingError(
            ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            details={"message": str(e)},
        ) from e
    except StripeServiceError as e:
        raise OrderingError(ErrorCode.CONFIGURATION_ERROR) from e

    log_webhook_event(logger, event.type, event.id, result="received")

    try:
        outcome = handler.process_event(event)
    except StripeServiceError as e:
        log_webhook_event(logger, event.type, event.id, result="error", error=str(e))
        raise OrderingError(
            ErrorCode.STRIPE_API_ERROR,
            details={"event_id": event.id},
        ) from e

    return WebhookResponse(
        received=True,
        event_id=event.id,
        event_type=event.type,
        processing_result=outcome.result,
        message=outcome.message,
    )
