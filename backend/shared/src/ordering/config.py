"""Runtime settings for the ordering handlers.

Non-secret settings are read from environment variables. Secrets (Stripe,
Resend and Twilio credentials) live in SSM Parameter Store under
``/ordering/{environment}/...`` and are fetched by the service that needs them.
"""

import os
from functools import lru_cache

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Environment-derived configuration."""

    environment: str = Field(default="dev", description="Deployment environment (dev, prod)")
    frontend_url: str | None = Field(
        default=None,
        description="Storefront base URL used for Checkout redirects",
        examples=["https://d818-restaurant.vercel.app"],
    )
    currency: str = "gbp"
    brand_name: str = "D818"
    restaurant_email: str = "info@d818.co.uk"
    orders_from_email: str = "D818 Orders <onboarding@resend.dev>"
    customer_from_email: str = "D818 Restaurant <onboarding@resend.dev>"
    restaurant_phone: str = Field(
        default="0784662910",
        description="Phone number printed in customer-facing copy",
    )
    twilio_whatsapp_number: str | None = Field(
        default=None,
        description="Twilio WhatsApp sender, e.g. whatsapp:+14155238886",
    )
    restaurant_whatsapp_number: str | None = Field(
        default=None,
        description="Restaurant WhatsApp number that receives order alerts",
    )
    notification_ledger_table: str | None = Field(
        default=None,
        description="DynamoDB table for atomic notification claims (optional)",
    )
    notification_claim_lease_seconds: int = Field(
        default=300,
        gt=0,
        description="Age after which an unreleased notification claim can be taken over",
    )
    password_reset_url: str = "https://d818-restaurant.vercel.app/reset-password"

    @property
    def ssm_prefix(self) -> str:
        return f"/ordering/{self.environment}"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, ignoring empty values."""
        values = {
            name: os.environ[name.upper()]
            for name in cls.model_fields
            if os.environ.get(name.upper())
        }
        return cls(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the shared Settings instance.

    Returns:
        Settings: Settings read from the environment on first call.
    """
    return Settings.from_env()


def reset_settings() -> None:
    """Clear cached settings (for testing only)."""
    get_settings.cache_clear()
