"""API models for the checkout endpoints.

Request bodies use the storefront's camelCase field names.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ordering.models.cart import CartItem
from ordering.models.enums import DeliveryOption
from ordering.models.metadata import parse_bool
from ordering.models.order import Customer, DeliveryDetails


class CreateCheckoutSessionRequest(BaseModel):
    """Request to start a Stripe Checkout for a cart."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "orderId": "D818-1700000000000",
                    "items": [{"name": "Jollof Rice", "quantity": 2, "price": 8.5}],
                    "deliveryFee": 3.5,
                    "user": {"name": "Ada", "email": "ada@example.com", "phone": "07700900123"},
                    "deliveryOption": "delivery",
                    "deliveryDetails": {"address": "1 High St", "postcode": "M1 1AA"},
                    "withinRadius": True,
                }
            ]
        },
    )

    order_id: str = Field(..., min_length=1, description="Storefront order ID")
    items: list[CartItem] = Field(..., min_length=1, description="Cart lines to charge")
    delivery_fee: Decimal | None = Field(
        default=None,
        ge=0,
        description="Delivery fee in pounds; a fee line is added when positive",
    )
    user: Customer = Field(default_factory=Customer)
    delivery_details: DeliveryDetails | None = None
    delivery_option: DeliveryOption = DeliveryOption.COLLECTION
    within_radius: bool = True

    @field_validator("delivery_option", mode="before")
    @classmethod
    def _normalize_delivery_option(cls, value: object) -> DeliveryOption:
        return DeliveryOption.normalize(value)

    @field_validator("within_radius", mode="before")
    @classmethod
    def _parse_within_radius(cls, value: object) -> bool:
        return parse_bool(value, default=True)

    @property
    def contact_phone(self) -> str:
        if self.delivery_details and self.delivery_details.phone:
            return self.delivery_details.phone
        return self.user.phone


class CheckoutSessionResponse(BaseModel):
    """Hosted Checkout link for the storefront to redirect to."""

    url: str = Field(..., description="Stripe-hosted Checkout page URL")


class VerifySessionResponse(BaseModel):
    """Payment state of a Checkout Session."""

    model_config = ConfigDict(populate_by_name=True)

    paid: bool
    amount_total: float = Field(..., description="Amount charged, in pounds")
    order_id: str | None = Field(default=None, alias="orderId")
