"""Email delivery through the Resend HTTP API."""

import logging
from functools import lru_cache

import httpx

from .ssm_service import SSMServiceError, get_ssm_service

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_TIMEOUT_SECONDS = 10.0


class EmailServiceError(Exception):
    """Raised when an email cannot be sent."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmailService:
    """Sends HTML email via Resend.

    The API key is read lazily from SSM (``resend/api_key``) unless given.

    Usage:
        email = get_email_service()
        message_id = email.send(
            sender="D818 Orders <orders@d818.co.uk>",
            to="info@d818.co.uk",
            subject="New Order: D818-1042",
            html="<p>...</p>",
        )
    """

    def __init__(
        self,
        api_key: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._http = http_client or httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS)

    def _get_api_key(self) -> str:
        if self._api_key is None:
            try:
                self._api_key = get_ssm_service().get_secret("resend/api_key")
            except SSMServiceError as e:
                raise EmailServiceError(f"Email provider is not configured: {e}") from e
        return self._api_key

    def send(
        self,
        *,
        sender: str,
        to: str,
        subject: str,
        html: str,
        reply_to: str | None = None,
    ) -> str:
        """Send one email.

        Args:
            sender: From address, optionally with a display name.
            to: Recipient address.
            subject: Subject line.
            html: HTML body.
            reply_to: Optional Reply-To address.

        Returns:
            Resend message ID.

        Raises:
            EmailServiceError: If the provider rejects the request or is unreachable.
        """
        payload: dict[str, object] = {
            "from": sender,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            response = self._http.post(
                RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self._get_api_key()}"},
            )
        except httpx.HTTPError as e:
            logger.error("Resend request failed: %s", e)
            raise EmailServiceError(f"Failed to reach email provider: {e}") from e

        if response.is_error:
            logger.error(
                "Resend rejected email to %s: %s %s",
                to,
                response.status_code,
                response.text,
            )
            raise EmailServiceError(
                f"Failed to send email: {response.text}",
                status_code=response.status_code,
            )

        message_id = str(response.json().get("id", ""))
        logger.info("Email sent to %s (id=%s)", to, message_id)
        return message_id


@lru_cache(maxsize=1)
def get_email_service() -> EmailService:
    """Get the shared EmailService instance."""
    return EmailService()
