"""Order summary models.

An Order is never stored: it is rebuilt from a Stripe Checkout Session for
the lifetime of one request and handed to the notification channels.
JSON field names are camelCase to match the storefront payloads.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ordering.utils.money import format_amount

from .enums import DeliveryOption

_CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Customer(BaseModel):
    """Identity of the person who placed the order."""

    model_config = _CAMEL_CONFIG

    name: str = Field(default="Guest", description="Customer display name")
    phone: str = Field(default="", description="Contact phone number")
    email: str = Field(default="", description="Contact email address")

    @field_validator("name", "phone", "email", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value


class OrderItem(BaseModel):
    """One ordered product with its unit price in major units."""

    model_config = _CAMEL_CONFIG

    name: str = Field(..., description="Product name")
    quantity: int = Field(..., ge=0, description="Number of units")
    price: float = Field(..., ge=0, description="Unit price, two decimal places")

    @property
    def line_total(self) -> str:
        """Formatted price x quantity for display."""
        return format_amount(self.price * self.quantity)


class DeliveryDetails(BaseModel):
    """Where and how to reach the customer for non-collection orders."""

    model_config = _CAMEL_CONFIG

    address: str = ""
    postcode: str = ""
    notes: str = ""
    phone: str = ""
    email: str = ""

    @field_validator("address", "postcode", "notes", "phone", "email", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value


class Order(BaseModel):
    """Reconstructed order summary.

    Amounts are two-decimal strings (``"22.00"``) as shown in notifications.
    """

    model_config = _CAMEL_CONFIG

    order_id: str = Field(..., min_length=1, description="Storefront order ID")
    user: Customer = Field(default_factory=Customer)
    items: list[OrderItem] = Field(default_factory=list)
    delivery_option: DeliveryOption = DeliveryOption.COLLECTION
    delivery_details: DeliveryDetails | None = None
    subtotal: str = "0.00"
    delivery_fee: str = "0.00"
    total: str = "0.00"
    within_radius: bool = True
    payment_method: str | None = None
    payment_id: str | None = None
    payment_status: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("delivery_option", mode="before")
    @classmethod
    def _normalize_delivery_option(cls, value: object) -> DeliveryOption:
        return DeliveryOption.normalize(value)

    @field_validator("subtotal", "delivery_fee", "total", mode="before")
    @classmethod
    def _format_amounts(cls, value: object) -> str:
        return format_amount(value)

    @property
    def contact_phone(self) -> str:
        """Phone to call about the order, preferring the delivery contact."""
        if self.delivery_details and self.delivery_details.phone:
            return self.delivery_details.phone
        return self.user.phone

    @property
    def is_collection(self) -> bool:
        return self.delivery_option == DeliveryOption.COLLECTION

    def to_json(self) -> dict:
        """Serialise with the storefront's camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)
