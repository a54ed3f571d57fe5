"""Pytest configuration and fixtures for D818 ordering backend tests.

This module provides reusable fixtures for testing:
- AWS credential isolation for moto (SSM, DynamoDB)
- Settings and service-cache resets between tests
- Sample Stripe sessions, line items and orders
"""

import os
from datetime import UTC, datetime
from typing import Any, Generator
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ["ENVIRONMENT"] = "test"

# Fake credentials so boto3 never reaches real AWS
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from ordering.config import Settings  # noqa: E402
from ordering.models.order import Customer, DeliveryDetails, Order, OrderItem  # noqa: E402
from ordering.models.stripe_webhook import CheckoutSession, LineItem  # noqa: E402
from ordering.services.stripe_service import StripeService  # noqa: E402
from ordering_api.dependencies import reset_services  # noqa: E402

TEST_ORDER_ID = "D818-1700000000000"
TEST_SESSION_ID = "cs_test_a1b2c3"
TEST_PAYMENT_INTENT_ID = "pi_3TestPaymentIntent"
TEST_CUSTOMER_EMAIL = "ada@example.com"
TEST_RESTAURANT_WHATSAPP = "+447700900001"


# === Service State ===


@pytest.fixture(autouse=True)
def reset_service_state() -> Generator[None, None, None]:
    """Clear cached settings and service singletons around every test.

    Settings are read from the environment on first use, so tests that
    monkeypatch environment variables get a fresh read.
    """
    reset_services()
    yield
    reset_services()


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


@pytest.fixture
def ssm_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Create a mocked SSM client."""
    with mock_aws():
        yield boto3.client("ssm", region_name="eu-west-1")


@pytest.fixture
def dynamodb_resource(aws_credentials: None) -> Generator[Any, None, None]:
    """Create a mocked DynamoDB resource."""
    with mock_aws():
        yield boto3.resource("dynamodb", region_name="eu-west-1")


@pytest.fixture
def ledger_table(dynamodb_resource: Any) -> str:
    """Create the notification ledger table and return its name."""
    table_name = "test-notification-ledger"
    dynamodb_resource.create_table(
        TableName=table_name,
        KeySchema=[{"AttributeName": "payment_intent_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "payment_intent_id", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )
    return table_name


# === Settings ===


@pytest.fixture
def settings() -> Settings:
    """Settings with every optional channel configured."""
    return Settings(
        environment="test",
        frontend_url="https://shop.example.com",
        restaurant_email="kitchen@example.com",
        orders_from_email="Orders <orders@example.com>",
        customer_from_email="D818 <hello@example.com>",
        twilio_whatsapp_number="whatsapp:+14155238886",
        restaurant_whatsapp_number=TEST_RESTAURANT_WHATSAPP,
        password_reset_url="https://shop.example.com/reset-password",
    )


# === Stripe Objects ===


@pytest.fixture
def session_metadata() -> dict[str, str]:
    """Metadata as written by create-checkout-session for a delivery order."""
    return {
        "orderId": TEST_ORDER_ID,
        "customerEmail": TEST_CUSTOMER_EMAIL,
        "customerName": "Ada Obi",
        "phone": "07700900123",
        "deliveryOption": "delivery",
        "postcode": "NG1 5FS",
        "address": "12 Market Street",
        "notes": "Ring twice",
        "withinRadius": "true",
    }


@pytest.fixture
def paid_session(session_metadata: dict[str, str]) -> CheckoutSession:
    """A paid session: £25.50 including a £3.50 delivery fee."""
    return CheckoutSession(
        id=TEST_SESSION_ID,
        payment_status="paid",
        client_reference_id=TEST_ORDER_ID,
        metadata=session_metadata,
        payment_intent_id=TEST_PAYMENT_INTENT_ID,
        amount_total=2550,
        customer_email=TEST_CUSTOMER_EMAIL,
    )


@pytest.fixture
def line_items() -> list[LineItem]:
    """Two products summing to £22.00 plus the delivery fee line."""
    return [
        LineItem(description="Jollof Rice", quantity=2, amount_total=1700),
        LineItem(description="Puff Puff", quantity=1, amount_total=500),
        LineItem(description="Delivery fee", quantity=1, amount_total=350),
    ]


@pytest.fixture
def checkout_completed_payload(session_metadata: dict[str, str]) -> dict[str, Any]:
    """A checkout.session.completed event body as Stripe sends it."""
    return {
        "id": "evt_1TestCheckoutCompleted",
        "object": "event",
        "type": "checkout.session.completed",
        "created": 1700000000,
        "data": {
            "object": {
                "id": TEST_SESSION_ID,
                "object": "checkout.session",
                "payment_status": "paid",
                "client_reference_id": TEST_ORDER_ID,
                "payment_intent": TEST_PAYMENT_INTENT_ID,
                "amount_total": 2550,
                "currency": "gbp",
                "customer_details": {"email": TEST_CUSTOMER_EMAIL},
                "metadata": session_metadata,
            }
        },
    }


# === Orders ===


@pytest.fixture
def sample_order() -> Order:
    """A reconstructed delivery order."""
    return Order(
        order_id=TEST_ORDER_ID,
        user=Customer(name="Ada Obi", phone="07700900123", email=TEST_CUSTOMER_EMAIL),
        items=[
            OrderItem(name="Jollof Rice", quantity=2, price=8.5),
            OrderItem(name="Puff Puff", quantity=1, price=5.0),
        ],
        delivery_option="delivery",
        delivery_details=DeliveryDetails(
            address="12 Market Street",
            postcode="NG1 5FS",
            notes="Ring twice",
            phone="07700900123",
            email=TEST_CUSTOMER_EMAIL,
        ),
        subtotal="22.00",
        delivery_fee="3.50",
        total="25.50",
        within_radius=True,
        payment_method="stripe",
        payment_id=TEST_PAYMENT_INTENT_ID,
        payment_status="paid",
        timestamp=datetime(2026, 10, 16, 18, 42, tzinfo=UTC),
    )


# === Collaborator Mocks ===


@pytest.fixture
def mock_stripe_service(paid_session: CheckoutSession, line_items: list[LineItem]) -> MagicMock:
    """StripeService mock returning the paid session and its line items."""
    service = MagicMock(spec=StripeService)
    service.retrieve_session.return_value = paid_session
    service.list_line_items.return_value = line_items
    service.get_payment_intent_metadata.return_value = {}
    return service
