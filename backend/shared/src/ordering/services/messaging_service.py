"""WhatsApp messaging through the Twilio Messages API."""

import logging
import re
from functools import lru_cache

import httpx

from ordering.config import get_settings

from .ssm_service import SSMServiceError, get_ssm_service

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"
DEFAULT_TIMEOUT_SECONDS = 10.0
UK_COUNTRY_CODE = "44"


class MessagingServiceError(Exception):
    """Raised when a WhatsApp message cannot be sent."""


def to_whatsapp_address(phone: str) -> str | None:
    """Normalise a phone number to Twilio's ``whatsapp:+<digits>`` form.

    National UK numbers (leading 0) get the 44 country code.

    Returns:
        The address, or None when the input has no digits.
    """
    if phone.startswith("whatsapp:"):
        return phone
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("00"):
        digits = digits[2:]
    elif digits.startswith("0"):
        digits = UK_COUNTRY_CODE + digits[1:]
    return f"whatsapp:+{digits}" if digits else None


class MessagingService:
    """Sends WhatsApp messages via Twilio.

    Credentials are optional: when the account SID, auth token or sender
    number is missing the service reports itself unconfigured and callers
    skip messaging.
    """

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number or get_settings().twilio_whatsapp_number
        self._credentials_loaded = account_sid is not None and auth_token is not None
        self._http = http_client or httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS)

    def _load_credentials(self) -> None:
        if self._credentials_loaded:
            return
        ssm = get_ssm_service()
        try:
            self._account_sid = self._account_sid or ssm.get_optional_secret("twilio/account_sid")
            self._auth_token = self._auth_token or ssm.get_optional_secret("twilio/auth_token")
        except SSMServiceError as e:
            raise MessagingServiceError(f"Failed to load Twilio credentials: {e}") from e
        self._credentials_loaded = True

    def is_configured(self) -> bool:
        """Whether credentials and a sender number are available."""
        self._load_credentials()
        return bool(self._account_sid and self._auth_token and self._from_number)

    def send(self, to: str, body: str) -> str:
        """Send a WhatsApp text message.

        Args:
            to: Recipient phone number in any common format.
            body: Message text.

        Returns:
            Twilio message SID.

        Raises:
            MessagingServiceError: If unconfigured, the number is unusable,
                or Twilio rejects the request.
        """
        if not self.is_configured():
            raise MessagingServiceError("Twilio WhatsApp is not configured")

        recipient = to_whatsapp_address(to)
        if recipient is None:
            raise MessagingServiceError(f"Invalid recipient phone number: {to!r}")

        url = TWILIO_MESSAGES_URL.format(account_sid=self._account_sid)
        try:
            response = self._http.post(
                url,
                data={"From": to_whatsapp_address(self._from_number), "To": recipient, "Body": body},
                auth=(self._account_sid, self._auth_token),
            )
        except httpx.HTTPError as e:
            logger.error("Twilio request failed: %s", e)
            raise MessagingServiceError(f"Failed to reach messaging provider: {e}") from e

        if response.is_error:
            logger.error("Twilio rejected message to %s: %s %s", recipient, response.status_code, response.text)
            raise MessagingServiceError(f"Failed to send WhatsApp message: {response.text}")

        sid = str(response.json().get("sid", ""))
        logger.info("WhatsApp message sent to %s (sid=%s)", recipient, sid)
        return sid


@lru_cache(maxsize=1)
def get_messaging_service() -> MessagingService:
    """Get the shared MessagingService instance."""
    return MessagingService()
