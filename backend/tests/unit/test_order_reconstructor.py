"""Unit tests for order reconstruction from a Checkout Session.

Test categories:
- Totals: subtotal, delivery fee and total derived from Stripe amounts
- Items: unit prices, zero and missing quantities
- Delivery: option normalisation and delivery details
- Degradation: missing metadata and malformed totals
"""

from datetime import UTC, datetime

import pytest

from ordering.models.enums import DeliveryOption
from ordering.models.stripe_webhook import CheckoutSession, LineItem
from ordering.services.order_reconstructor import is_delivery_fee, reconstruct_order

TEST_ORDER_ID = "D818-1700000000000"
TEST_SESSION_ID = "cs_test_a1b2c3"
TEST_PAYMENT_INTENT_ID = "pi_3TestPaymentIntent"


def _session(**overrides) -> CheckoutSession:
    values = {
        "id": TEST_SESSION_ID,
        "payment_status": "paid",
        "client_reference_id": TEST_ORDER_ID,
        "payment_intent_id": TEST_PAYMENT_INTENT_ID,
        "amount_total": 1000,
    }
    values.update(overrides)
    return CheckoutSession(**values)


class TestTotals:
    """Amounts come from Stripe, not from the storefront."""

    def test_subtotal_fee_and_total(self, paid_session, line_items):
        """£25.50 paid with a £3.50 fee gives a £22.00 subtotal."""
        order = reconstruct_order(paid_session, line_items)

        assert order.subtotal == "22.00"
        assert order.delivery_fee == "3.50"
        assert order.total == "25.50"

    def test_no_fee_line_means_zero_fee(self):
        order = reconstruct_order(
            _session(amount_total=1700),
            [LineItem(description="Jollof Rice", quantity=2, amount_total=1700)],
        )

        assert order.delivery_fee == "0.00"
        assert order.subtotal == "17.00"

    def test_subtotal_clamped_to_zero(self):
        """A fee larger than the amount paid never yields a negative subtotal."""
        order = reconstruct_order(
            _session(amount_total=200),
            [LineItem(description="Delivery fee", quantity=1, amount_total=350)],
        )

        assert order.subtotal == "0.00"
        assert order.total == "2.00"

    @pytest.mark.parametrize("description", ["Delivery fee", "DELIVERY FEE", "  delivery fee  "])
    def test_fee_matched_ignoring_case_and_whitespace(self, description):
        assert is_delivery_fee(LineItem(description=description, quantity=1, amount_total=350))

    @pytest.mark.parametrize("description", ["Delivery", "Delivery fees", "Uber delivery fee"])
    def test_other_descriptions_are_products(self, description):
        assert not is_delivery_fee(LineItem(description=description, quantity=1, amount_total=350))

    def test_fee_line_excluded_from_items(self, paid_session, line_items):
        order = reconstruct_order(paid_session, line_items)

        assert [item.name for item in order.items] == ["Jollof Rice", "Puff Puff"]


class TestItems:
    """Unit prices are derived from each line's total."""

    def test_unit_price_is_total_divided_by_quantity(self, paid_session, line_items):
        order = reconstruct_order(paid_session, line_items)

        jollof = order.items[0]
        assert jollof.quantity == 2
        assert jollof.price == 8.5

    def test_unit_price_rounded_half_up(self):
        """£10.00 over 3 units rounds to £3.33; £0.05 over 2 rounds to £0.03."""
        order = reconstruct_order(
            _session(),
            [
                LineItem(description="Chin Chin", quantity=3, amount_total=1000),
                LineItem(description="Sweet", quantity=2, amount_total=5),
            ],
        )

        assert order.items[0].price == 3.33
        assert order.items[1].price == 0.03

    def test_zero_quantity_uses_line_total(self):
        """A zero quantity falls back to the line total instead of dividing by zero."""
        order = reconstruct_order(
            _session(),
            [LineItem(description="Free Drink", quantity=0, amount_total=250)],
        )

        assert order.items[0].quantity == 0
        assert order.items[0].price == 2.5

    def test_missing_quantity_counts_as_one(self):
        order = reconstruct_order(
            _session(),
            [LineItem(description="Suya", quantity=None, amount_total=600)],
        )

        assert order.items[0].quantity == 1
        assert order.items[0].price == 6.0


class TestDelivery:
    """Delivery option and details come from session metadata."""

    def test_delivery_order_has_details(self, paid_session, line_items):
        order = reconstruct_order(paid_session, line_items)

        assert order.delivery_option == DeliveryOption.DELIVERY
        assert order.delivery_details is not None
        assert order.delivery_details.address == "12 Market Street"
        assert order.delivery_details.postcode == "NG1 5FS"
        assert order.delivery_details.notes == "Ring twice"
        assert order.delivery_details.phone == "07700900123"

    def test_uber_order_has_details(self):
        order = reconstruct_order(
            _session(metadata={"deliveryOption": "uber", "address": "1 High St"}),
            [],
        )

        assert order.delivery_option == DeliveryOption.UBER
        assert order.delivery_details.address == "1 High St"

    def test_collection_order_has_no_details(self):
        order = reconstruct_order(
            _session(metadata={"deliveryOption": "collection", "address": "ignored"}),
            [],
        )

        assert order.delivery_option == DeliveryOption.COLLECTION
        assert order.delivery_details is None

    @pytest.mark.parametrize("value", ["pigeon", "DELIVERY", ""])
    def test_unknown_option_normalises_to_collection(self, value):
        order = reconstruct_order(_session(metadata={"deliveryOption": value}), [])

        assert order.delivery_option == DeliveryOption.COLLECTION
        assert order.delivery_details is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("true", True), ("false", False), ("FALSE", False), ("maybe", True)],
    )
    def test_within_radius_parsing(self, value, expected):
        order = reconstruct_order(_session(metadata={"withinRadius": value}), [])

        assert order.within_radius is expected


class TestDegradation:
    """Odd Stripe data produces a usable order rather than an exception."""

    def test_missing_metadata_uses_defaults(self):
        order = reconstruct_order(_session(metadata={}), [])

        assert order.order_id == TEST_ORDER_ID
        assert order.user.name == "Guest"
        assert order.user.email == ""
        assert order.delivery_option == DeliveryOption.COLLECTION
        assert order.within_radius is True

    def test_order_id_falls_back_to_metadata_then_session(self):
        from_metadata = reconstruct_order(
            _session(client_reference_id=None, metadata={"orderId": "D818-META"}), []
        )
        from_session = reconstruct_order(_session(client_reference_id=None, metadata={}), [])

        assert from_metadata.order_id == "D818-META"
        assert from_session.order_id == TEST_SESSION_ID

    def test_malformed_totals_degrade_to_zero(self):
        session = CheckoutSession.from_stripe(
            {"id": TEST_SESSION_ID, "payment_status": "paid", "amount_total": "not-a-number"}
        )
        items = [LineItem.from_stripe({"description": "Jollof Rice", "quantity": "x", "amount_total": None})]

        order = reconstruct_order(session, items)

        assert order.total == "0.00"
        assert order.subtotal == "0.00"
        assert order.items[0].price == 0.0

    def test_customer_email_prefers_session_details(self, paid_session):
        session = paid_session.model_copy(update={"customer_email": "paid-with@example.com"})

        order = reconstruct_order(session, [])

        assert order.user.email == "paid-with@example.com"

    def test_payment_fields_stamped(self, paid_session, line_items):
        now = datetime(2026, 10, 16, 18, 42, tzinfo=UTC)

        order = reconstruct_order(paid_session, line_items, now=now)

        assert order.payment_method == "stripe"
        assert order.payment_status == "paid"
        assert order.payment_id == TEST_PAYMENT_INTENT_ID
        assert order.timestamp == now

    def test_payment_id_falls_back_to_session(self):
        order = reconstruct_order(_session(payment_intent_id=None), [])

        assert order.payment_id == TEST_SESSION_ID
