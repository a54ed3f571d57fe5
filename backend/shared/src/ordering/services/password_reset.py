"""Password reset emails.

This is a placeholder flow: reset tokens are generated and emailed but not
stored, and the reset step accepts any token. It must not be relied on for
account security until tokens are persisted and verified.
"""

import secrets
from functools import lru_cache
from urllib.parse import urlencode

from ordering.config import Settings, get_settings
from ordering.utils.logging import get_logger

from .email_service import EmailService, get_email_service
from .templates import render

logger = get_logger(__name__)

TOKEN_BYTES = 24
TOKEN_TTL_MINUTES = 60


class PasswordResetService:
    """Sends reset links and acknowledges resets."""

    def __init__(self, email: EmailService, settings: Settings | None = None) -> None:
        self._email = email
        self._settings = settings or get_settings()

    def build_reset_link(self, email: str, token: str) -> str:
        query = urlencode({"token": token, "email": email})
        return f"{self._settings.password_reset_url}?{query}"

    def request_reset(self, email: str) -> str:
        """Generate a reset token and email the reset link.

        Returns:
            The generated token.

        Raises:
            EmailServiceError: If the email cannot be sent.
        """
        token = secrets.token_urlsafe(TOKEN_BYTES)
        self._email.send(
            sender=self._settings.customer_from_email,
            to=email,
            subject=f"Reset Your {self._settings.brand_name} Password",
            html=render(
                "password_reset.html",
                reset_link=self.build_reset_link(email, token),
                expires_in_minutes=TOKEN_TTL_MINUTES,
            ),
        )
        logger.info("Password reset email sent to %s", email)
        return token

    def reset_password(self, email: str | None, token: str | None) -> None:
        """Acknowledge a reset. Tokens are not verified."""
        logger.warning("Password reset accepted without token verification for %s", email)


@lru_cache(maxsize=1)
def get_password_reset_service() -> PasswordResetService:
    """Get the shared PasswordResetService instance."""
    return PasswordResetService(email=get_email_service())
