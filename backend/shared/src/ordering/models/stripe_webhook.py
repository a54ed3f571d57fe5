"""Read-only views of the Stripe objects the ordering flow consumes.

Stripe owns these records; this module only parses the fields we read.
Parsing is lenient: missing or malformed values degrade to safe defaults
instead of raising, because Stripe is the source of truth for totals.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import CheckoutPaymentStatus

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


def as_mapping(obj: Any) -> Mapping[str, Any]:
    """Return a Stripe object (or plain dict) as a read-only mapping."""
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return obj
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    raise TypeError(f"Cannot read Stripe object of type {type(obj).__name__}")


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(number, 0)


class LineItem(BaseModel):
    """One priced entry of a Checkout Session."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    quantity: int | None = Field(default=None, description="Units; None if Stripe omitted it")
    amount_total: int = Field(default=0, ge=0, description="Total for all units, in pence")

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: Any) -> int | None:
        return None if value is None else _non_negative_int(value)

    @field_validator("amount_total", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> int:
        return _non_negative_int(value)

    @classmethod
    def from_stripe(cls, obj: Any) -> "LineItem":
        data = as_mapping(obj)
        return cls(
            description=data.get("description"),
            quantity=data.get("quantity"),
            amount_total=data.get("amount_total"),
        )


class CheckoutSession(BaseModel):
    """A Stripe Checkout Session: one payment attempt for one order."""

    model_config = ConfigDict(frozen=True)

    id: str
    payment_status: str = CheckoutPaymentStatus.UNPAID.value
    client_reference_id: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    payment_intent_id: str | None = None
    amount_total: int = Field(default=0, ge=0, description="Amount charged, in pence")
    customer_email: str | None = None

    @field_validator("amount_total", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> int:
        return _non_negative_int(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _coerce_metadata(cls, value: Any) -> dict[str, str]:
        if not value:
            return {}
        return {str(k): "" if v is None else str(v) for k, v in as_mapping(value).items()}

    @property
    def is_paid(self) -> bool:
        return self.payment_status == CheckoutPaymentStatus.PAID.value

    @property
    def order_id(self) -> str | None:
        """Storefront order ID from the reference id, falling back to metadata."""
        return self.client_reference_id or self.metadata.get("orderId") or None

    @classmethod
    def from_stripe(cls, obj: Any) -> "CheckoutSession":
        data = as_mapping(obj)

        payment_intent = data.get("payment_intent")
        if payment_intent is not None and not isinstance(payment_intent, str):
            payment_intent = as_mapping(payment_intent).get("id")

        customer_details = as_mapping(data.get("customer_details"))
        customer_email = customer_details.get("email") or data.get("customer_email")

        return cls(
            id=str(data.get("id") or ""),
            payment_status=str(data.get("payment_status") or CheckoutPaymentStatus.UNPAID.value),
            client_reference_id=data.get("client_reference_id") or None,
            metadata=data.get("metadata"),
            payment_intent_id=payment_intent or None,
            amount_total=data.get("amount_total"),
            customer_email=customer_email or None,
        )


class PaymentEvent(BaseModel):
    """A verified Stripe webhook event."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    type: str = ""
    data_object: dict[str, Any] = Field(
        default_factory=dict,
        description="The event's data.object payload",
    )

    @property
    def is_checkout_completed(self) -> bool:
        return self.type == CHECKOUT_SESSION_COMPLETED

    def checkout_session(self) -> CheckoutSession:
        """Parse the payload as a Checkout Session."""
        return CheckoutSession.from_stripe(self.data_object)

    @classmethod
    def from_stripe(cls, obj: Any) -> "PaymentEvent":
        data = as_mapping(obj)
        event_data = as_mapping(data.get("data"))
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or ""),
            data_object=dict(as_mapping(event_data.get("object"))),
        )
