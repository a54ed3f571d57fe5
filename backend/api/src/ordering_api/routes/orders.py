"""Orders endpoint: notification dispatch for a paid storefront order.

The submitted order is only trusted after its Checkout Session is
confirmed paid for the same order and amount.
"""

from fastapi import APIRouter, Depends

from ordering.models.errors import ErrorCode, OrderingError
from ordering.services.orders_handler import OrdersHandler
from ordering.services.stripe_service import StripeServiceError
from ordering.utils.logging import get_logger
from ordering_api.dependencies import orders_handler_dependency
from ordering_api.models.orders import OrderNotifyRequest, OrderNotifyResponse

logger = get_logger(__name__)

router = APIRouter(tags=["orders"])


@router.post(
    "/orders",
    summary="Send order notifications",
    description="""
Email and WhatsApp a paid order to the restaurant and the customer.

**Notes:**
- `sessionId` must reference a paid Checkout Session for the same `orderId`
- The submitted total must match the amount paid (within 0.01)
- Notifications already sent by the payment webhook are not repeated
""",
    response_model=OrderNotifyResponse,
    responses={
        200: {"description": "Order notified (or already notified)"},
        400: {"description": "Invalid order, order mismatch or total mismatch"},
        402: {"description": "Checkout Session not paid"},
        500: {"description": "Stripe or email failure"},
    },
)
async def notify_order(
    body: OrderNotifyRequest,
    handler: OrdersHandler = Depends(orders_handler_dependency),
) -> OrderNotifyResponse:
    """Verify payment for the order, then send its notifications."""
    if not body.order.user.email:
        raise OrderingError(ErrorCode.INVALID_INPUT, details={"field": "order.user.email"})

    try:
        outcome = handler.notify(body.order, body.session_id)
    except StripeServiceError as e:
        raise OrderingError(
            ErrorCode.SESSION_VERIFICATION_FAILED,
            details={"order_id": body.order.order_id},
        ) from e

    message = "Notifications already sent" if outcome.already_sent else "Order notifications sent"
    return OrderNotifyResponse(success=True, order_id=outcome.order.order_id, message=message)
