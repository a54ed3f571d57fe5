"""Typed schema for order data carried in Stripe metadata.

Stripe metadata is a flat string-to-string map (max 50 keys, 500 characters
per value). OrderMetadata is the only place that converts between that map
and typed order fields, in both directions.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import DeliveryOption

METADATA_VALUE_LIMIT = 500

# Payment intent metadata keys for the notification idempotency flag
NOTIFICATIONS_SENT_KEY = "notifications_sent"
NOTIFIED_ORDER_ID_KEY = "order_id"

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}

# Field name -> Stripe metadata key (the storefront reads these keys too)
_STRIPE_KEYS: dict[str, str] = {
    "order_id": "orderId",
    "customer_email": "customerEmail",
    "customer_name": "customerName",
    "phone": "phone",
    "delivery_option": "deliveryOption",
    "postcode": "postcode",
    "address": "address",
    "notes": "notes",
    "within_radius": "withinRadius",
}


def parse_bool(value: Any, default: bool = True) -> bool:
    """Parse a metadata boolean, returning default when absent or unparseable."""
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return default


class OrderMetadata(BaseModel):
    """Order fields stored on a Checkout Session."""

    model_config = ConfigDict(validate_assignment=True)

    order_id: str = ""
    customer_email: str = ""
    customer_name: str = ""
    phone: str = ""
    delivery_option: DeliveryOption = DeliveryOption.COLLECTION
    postcode: str = ""
    address: str = ""
    notes: str = ""
    within_radius: bool = Field(
        default=True,
        description="Whether the delivery address is inside the delivery radius",
    )

    @field_validator(
        "order_id",
        "customer_email",
        "customer_name",
        "phone",
        "postcode",
        "address",
        "notes",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("delivery_option", mode="before")
    @classmethod
    def _normalize_delivery_option(cls, value: Any) -> DeliveryOption:
        return DeliveryOption.normalize(value)

    @field_validator("within_radius", mode="before")
    @classmethod
    def _parse_within_radius(cls, value: Any) -> bool:
        return parse_bool(value, default=True)

    def to_stripe_metadata(self) -> dict[str, str]:
        """Serialise to Stripe's string map, truncating over-long values."""
        values = self.model_dump(mode="json")
        metadata: dict[str, str] = {}
        for field_name, key in _STRIPE_KEYS.items():
            value = values[field_name]
            text = str(value).lower() if isinstance(value, bool) else str(value)
            metadata[key] = text[:METADATA_VALUE_LIMIT]
        return metadata

    @classmethod
    def from_stripe_metadata(cls, metadata: Mapping[str, Any] | None) -> "OrderMetadata":
        """Parse a Stripe metadata map, tolerating missing or malformed keys."""
        metadata = metadata or {}
        return cls(
            **{
                field_name: metadata.get(key)
                for field_name, key in _STRIPE_KEYS.items()
                if metadata.get(key) is not None
            }
        )
