"""API models for the orders notify endpoint."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ordering.models.order import Order


class OrderNotifyRequest(BaseModel):
    """An order submitted after the Checkout redirect.

    The body is the storefront's order object plus the Checkout Session
    it was paid with.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str = Field(..., min_length=1, description="Stripe Checkout Session ID")
    order: Order


class OrderNotifyResponse(BaseModel):
    """Acknowledgement of a notified order."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    order_id: str
    message: str
