"""DynamoDB ledger of payment intents whose notifications were claimed.

A conditional put keyed by payment intent ID is atomic, so of two
concurrent deliveries of the same event exactly one wins the claim.

A claim is a lease: the holder normally either sends the notifications
(after which the payment intent flag takes over) or releases the claim.
A holder killed in between (Lambda timeout) releases nothing, so a claim
older than the lease can be taken over by a later delivery.
"""

import datetime as dt
import logging
from typing import Any

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

DEFAULT_LEASE_SECONDS = 300


class NotificationLedgerError(Exception):
    """Raised when the ledger table cannot be read or written."""


class NotificationLedger:
    """Claims payment intents before notifications are dispatched.

    Table schema: partition key ``payment_intent_id`` (S). ``expires_at``
    (epoch seconds) can be enabled as the table's TTL attribute.
    """

    def __init__(
        self,
        table_name: str,
        resource: Any | None = None,
        lease_seconds: int = DEFAULT_LEASE_SECONDS,
    ) -> None:
        """Initialize the ledger.

        Args:
            table_name: Full DynamoDB table name.
            resource: Optional boto3 DynamoDB resource (for testing).
            lease_seconds: Age after which an unreleased claim can be taken over.
        """
        self._table = (resource or boto3.resource("dynamodb")).Table(table_name)
        self._lease = dt.timedelta(seconds=lease_seconds)

    def claim(self, payment_intent_id: str, order_id: str | None) -> bool:
        """Record a claim for a payment intent.

        Returns:
            True if this caller now owns the claim, False if a live claim
            already exists.

        Raises:
            NotificationLedgerError: For failures other than a lost claim.
        """
        now = dt.datetime.now(dt.UTC)
        item: dict[str, Any] = {
            "payment_intent_id": payment_intent_id,
            "claimed_at": now.isoformat(timespec="microseconds"),
            "expires_at": int((now + self._lease).timestamp()),
        }
        if order_id:
            item["order_id"] = order_id

        try:
            self._table.put_item(
                Item=item,
                # UTC ISO timestamps compare correctly as strings
                ConditionExpression="attribute_not_exists(payment_intent_id) OR claimed_at < :cutoff",
                ExpressionAttributeValues={":cutoff": (now - self._lease).isoformat(timespec="microseconds")},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                logger.info("Notification claim for %s already exists", payment_intent_id)
                return False
            raise NotificationLedgerError(f"Failed to claim {payment_intent_id}: {e}") from e

        logger.info("Notification claim recorded for %s", payment_intent_id)
        return True

    def release(self, payment_intent_id: str) -> None:
        """Drop a claim so a later delivery can dispatch again.

        Raises:
            NotificationLedgerError: If the delete fails.
        """
        try:
            self._table.delete_item(Key={"payment_intent_id": payment_intent_id})
        except ClientError as e:
            raise NotificationLedgerError(f"Failed to release {payment_intent_id}: {e}") from e
        logger.info("Notification claim released for %s", payment_intent_id)
