"""SSM Parameter Store service for secret retrieval.

Stripe, Resend and Twilio credentials are SecureString parameters under
``/ordering/{environment}/``. Values are cached for the lifetime of the
Lambda container.
"""

import logging
from functools import lru_cache
from typing import ClassVar

import boto3
from botocore.exceptions import ClientError

from ordering.config import get_settings

logger = logging.getLogger(__name__)


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""

    def __init__(self, message: str, *, not_found: bool = False) -> None:
        super().__init__(message)
        self.not_found = not_found


class SSMService:
    """Service for retrieving secrets from AWS SSM Parameter Store.

    Usage:
        ssm = get_ssm_service()
        stripe_key = ssm.get_secret("stripe/secret_key")
    """

    _cache: ClassVar[dict[str, str]] = {}

    def __init__(self, prefix: str | None = None) -> None:
        """Initialize the SSM client.

        Args:
            prefix: Parameter path prefix. Defaults to the settings prefix.
        """
        self._prefix = (prefix or get_settings().ssm_prefix).rstrip("/")
        self._client = boto3.client("ssm")

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve a parameter value from SSM Parameter Store.

        Args:
            name: Full parameter path (e.g., "/ordering/dev/stripe/secret_key")
            use_cache: Whether to use cached value if available (default: True)

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If parameter cannot be retrieved.
        """
        if use_cache and name in self._cache:
            logger.debug("SSM cache hit for %s", name)
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(
                    f"SSM parameter not found: {name}", not_found=True
                ) from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(f"Failed to retrieve SSM parameter {name}: {e}") from e

        value = response["Parameter"]["Value"]
        self._cache[name] = value
        return value

    def get_secret(self, relative_name: str) -> str:
        """Retrieve a secret relative to the environment prefix.

        Args:
            relative_name: Path below the prefix (e.g., "resend/api_key")

        Raises:
            SSMServiceError: If the secret cannot be retrieved.
        """
        return self.get_parameter(f"{self._prefix}/{relative_name}")

    def get_optional_secret(self, relative_name: str) -> str | None:
        """Retrieve a secret that may legitimately be absent.

        Returns:
            The value, or None when the parameter does not exist.

        Raises:
            SSMServiceError: For failures other than a missing parameter.
        """
        try:
            return self.get_secret(relative_name)
        except SSMServiceError as e:
            if e.not_found:
                logger.info("Optional SSM parameter %s is not configured", relative_name)
                return None
            raise

    @classmethod
    def clear_cache(cls) -> None:
        """Clear all cached parameters."""
        cls._cache.clear()


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance.

    Returns:
        SSMService: Shared service instance.
    """
    return SSMService()
