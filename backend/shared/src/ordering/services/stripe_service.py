"""Stripe service for checkout sessions, webhooks and payment intents.

Provides integration with Stripe using the v8+ StripeClient pattern.
Retrieves API keys from SSM Parameter Store.
"""

import logging
from functools import lru_cache
from typing import Any

import stripe
from stripe import StripeClient

from ordering.models.stripe_webhook import CheckoutSession, LineItem, PaymentEvent, as_mapping

from .ssm_service import SSMServiceError, get_ssm_service

logger = logging.getLogger(__name__)

LINE_ITEMS_PAGE_SIZE = 100


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        """Initialize with message and optional Stripe error code.

        Args:
            message: Human-readable error message.
            stripe_error_code: Stripe-specific error code if available.
        """
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


class WebhookSignatureError(StripeServiceError):
    """Raised when a webhook payload fails signature verification."""


class StripeService:
    """Service for Stripe operations used by the ordering flow.

    Handles:
    - Checkout session creation and retrieval
    - Webhook signature validation
    - Line item listing
    - Payment intent metadata (notification idempotency flag)

    Usage:
        stripe_svc = get_stripe_service()
        session = stripe_svc.retrieve_session("cs_test_abc123")
    """

    def __init__(self, client: StripeClient | None = None, webhook_secret: str | None = None) -> None:
        """Initialize Stripe service.

        Args:
            client: Preconfigured client. Built lazily from SSM when omitted.
            webhook_secret: Webhook signing secret. Read lazily from SSM when omitted.
        """
        self._ssm = get_ssm_service()
        self._client = client
        self._webhook_secret = webhook_secret

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization).

        Raises:
            StripeServiceError: If credentials cannot be retrieved.
        """
        if self._client is None:
            try:
                secret_key = self._ssm.get_secret("stripe/secret_key")
            except SSMServiceError as e:
                raise StripeServiceError(f"Failed to initialize Stripe client: {e}") from e
            self._client = StripeClient(secret_key)
            logger.info("Stripe client initialized")
        return self._client

    def _get_webhook_secret(self) -> str:
        """Get the webhook signing secret.

        Raises:
            StripeServiceError: If secret cannot be retrieved.
        """
        if self._webhook_secret is None:
            try:
                self._webhook_secret = self._ssm.get_secret("stripe/webhook_secret")
            except SSMServiceError as e:
                raise StripeServiceError(f"Failed to get webhook secret: {e}") from e
        return self._webhook_secret

    @staticmethod
    def _wrap(action: str, error: stripe.StripeError) -> StripeServiceError:
        error_code = getattr(error, "code", None)
        logger.error("Stripe %s failed: %s (code: %s)", action, str(error), error_code)
        return StripeServiceError(f"Failed to {action}: {error}", stripe_error_code=error_code)

    def create_checkout_session(
        self,
        *,
        order_id: str,
        line_items: list[dict[str, Any]],
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        description: str,
        customer_email: str | None = None,
    ) -> dict[str, Any]:
        """Create a Stripe Checkout session for an order.

        Args:
            order_id: Storefront order ID, stored as client_reference_id.
            line_items: Stripe line_items parameter (one entry per cart line).
            metadata: Session metadata (string values only).
            success_url: URL to redirect on success (supports {CHECKOUT_SESSION_ID}).
            cancel_url: URL to redirect on cancel.
            description: PaymentIntent description shown in the dashboard.
            customer_email: Optional customer email for the Stripe receipt.

        Returns:
            Dict with session_id and checkout_url.

        Raises:
            StripeServiceError: If session creation fails.
        """
        client = self._get_client()

        params: dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "client_reference_id": order_id,
            "line_items": line_items,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "payment_intent_data": {"description": description},
            "metadata": metadata,
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            logger.info(
                "Creating Stripe checkout session for order %s with %d line items",
                order_id,
                len(line_items),
            )
            session = client.checkout.sessions.create(params=params)
        except stripe.StripeError as e:
            raise self._wrap("create checkout session", e) from e

        logger.info("Checkout session created: %s for order %s", session.id, order_id)
        return {"session_id": session.id, "checkout_url": session.url}

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        """Retrieve a Checkout Session by ID.

        Raises:
            StripeServiceError: If the session cannot be retrieved.
        """
        client = self._get_client()
        try:
            session = client.checkout.sessions.retrieve(session_id)
        except stripe.StripeError as e:
            raise self._wrap("retrieve checkout session", e) from e
        return CheckoutSession.from_stripe(session)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> PaymentEvent:
        """Verify a webhook signature and parse the event.

        The signature covers the exact request bytes, so the payload must be
        the unparsed body.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.

        Returns:
            The verified PaymentEvent.

        Raises:
            WebhookSignatureError: If the signature or payload is invalid.
            StripeServiceError: If the signing secret cannot be retrieved.
        """
        webhook_secret = self._get_webhook_secret()

        try:
            event = stripe.Webhook.construct_event(payload, signature, webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise WebhookSignatureError("Invalid webhook signature") from e
        except ValueError as e:
            logger.warning("Invalid webhook payload: %s", str(e))
            raise WebhookSignatureError("Invalid webhook payload") from e

        parsed = PaymentEvent.from_stripe(event)
        logger.info("Webhook signature verified for event: %s", parsed.id)
        return parsed

    def list_line_items(self, session_id: str) -> list[LineItem]:
        """List every line item of a Checkout Session, in Stripe's order.

        Raises:
            StripeServiceError: If the line items cannot be listed.
        """
        client = self._get_client()
        try:
            page = client.checkout.sessions.line_items.list(
                session_id, params={"limit": LINE_ITEMS_PAGE_SIZE}
            )
            items = [LineItem.from_stripe(item) for item in page.auto_paging_iter()]
        except stripe.StripeError as e:
            raise self._wrap("list line items", e) from e

        logger.info("Found %d line items for session %s", len(items), session_id)
        return items

    def get_payment_intent_metadata(self, payment_intent_id: str) -> dict[str, str]:
        """Read a PaymentIntent's metadata.

        Raises:
            StripeServiceError: If the PaymentIntent cannot be retrieved.
        """
        client = self._get_client()
        try:
            payment_intent = client.payment_intents.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            raise self._wrap("retrieve payment intent", e) from e
        metadata = as_mapping(as_mapping(payment_intent).get("metadata"))
        return {str(k): str(v) for k, v in metadata.items()}

    def update_payment_intent_metadata(
        self,
        payment_intent_id: str,
        metadata: dict[str, str],
    ) -> None:
        """Write metadata keys onto a PaymentIntent.

        Stripe merges the given keys into the existing metadata; keys not
        mentioned are left untouched.

        Raises:
            StripeServiceError: If the update fails.
        """
        client = self._get_client()
        try:
            client.payment_intents.update(payment_intent_id, params={"metadata": metadata})
        except stripe.StripeError as e:
            raise self._wrap("update payment intent", e) from e
        logger.info("PaymentIntent %s metadata updated: %s", payment_intent_id, sorted(metadata))


@lru_cache(maxsize=1)
def get_stripe_service() -> StripeService:
    """Get the shared StripeService instance (singleton pattern).

    Returns:
        StripeService: Shared service instance.
    """
    return StripeService()
