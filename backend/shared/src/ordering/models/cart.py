"""Cart models submitted by the storefront at checkout."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartItem(BaseModel):
    """One cart line: a product, how many, and its unit price in pounds."""

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"name": "Jollof Rice", "quantity": 2, "price": 8.5}]},
    )

    name: str = Field(default="Item", description="Product name shown on the Checkout page")
    quantity: int = Field(..., gt=0, description="Number of units")
    price: Decimal = Field(..., gt=0, description="Unit price in pounds")

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value: object) -> str:
        text = "" if value is None else str(value)
        return text or "Item"
