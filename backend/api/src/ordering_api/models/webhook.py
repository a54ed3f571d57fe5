"""API models for the Stripe webhook endpoint."""

from pydantic import BaseModel

from ordering.models.enums import WebhookResult


class WebhookResponse(BaseModel):
    """Standard webhook response."""

    received: bool = True
    event_id: str | None = None
    event_type: str | None = None
    processing_result: WebhookResult
    message: str | None = None
