"""Unit tests for ordering models.

Test categories:
- OrderMetadata: Stripe metadata serialisation and lenient parsing
- Order: amount formatting and camelCase JSON
- Stripe views: CheckoutSession / PaymentEvent parsing
- Errors: OrderingError to ErrorResponse
"""

import pytest
from pydantic import ValidationError

from ordering.models import (
    CartItem,
    CheckoutSession,
    DeliveryOption,
    ErrorCode,
    LineItem,
    Order,
    OrderingError,
    OrderMetadata,
    PaymentEvent,
)
from ordering.models.metadata import METADATA_VALUE_LIMIT, parse_bool


class TestOrderMetadata:
    """Typed order fields stored as Stripe's string map."""

    def test_serialises_with_storefront_keys(self):
        metadata = OrderMetadata(
            order_id="D818-1",
            customer_email="ada@example.com",
            customer_name="Ada",
            phone="07700900123",
            delivery_option="uber",
            postcode="NG1 5FS",
            address="12 Market Street",
            notes="",
            within_radius=False,
        ).to_stripe_metadata()

        assert metadata == {
            "orderId": "D818-1",
            "customerEmail": "ada@example.com",
            "customerName": "Ada",
            "phone": "07700900123",
            "deliveryOption": "uber",
            "postcode": "NG1 5FS",
            "address": "12 Market Street",
            "notes": "",
            "withinRadius": "false",
        }

    def test_values_are_all_strings(self):
        metadata = OrderMetadata(order_id="D818-1").to_stripe_metadata()

        assert all(isinstance(value, str) for value in metadata.values())
        assert metadata["withinRadius"] == "true"
        assert metadata["deliveryOption"] == "collection"

    def test_long_values_truncated(self):
        metadata = OrderMetadata(notes="x" * 600).to_stripe_metadata()

        assert len(metadata["notes"]) == METADATA_VALUE_LIMIT

    def test_parses_back_from_stripe(self):
        original = OrderMetadata(
            order_id="D818-1",
            customer_name="Ada",
            delivery_option="delivery",
            within_radius=False,
        )

        parsed = OrderMetadata.from_stripe_metadata(original.to_stripe_metadata())

        assert parsed == original

    def test_lenient_parse_of_missing_and_odd_values(self):
        parsed = OrderMetadata.from_stripe_metadata(
            {"deliveryOption": "teleport", "withinRadius": "unknown", "phone": None}
        )

        assert parsed.delivery_option == DeliveryOption.COLLECTION
        assert parsed.within_radius is True
        assert parsed.phone == ""

    def test_none_metadata(self):
        assert OrderMetadata.from_stripe_metadata(None) == OrderMetadata()

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False), (" no ", False)],
    )
    def test_parse_bool(self, value, expected):
        assert parse_bool(value) is expected

    def test_parse_bool_default(self):
        assert parse_bool(None) is True
        assert parse_bool("garbage", default=False) is False


class TestDeliveryOption:
    @pytest.mark.parametrize("value", ["collection", "delivery", "uber"])
    def test_known_values(self, value):
        assert DeliveryOption.normalize(value).value == value

    @pytest.mark.parametrize("value", [None, "", "Delivery", "drone", 3])
    def test_unknown_values_are_collection(self, value):
        assert DeliveryOption.normalize(value) == DeliveryOption.COLLECTION


class TestOrder:
    def test_amounts_formatted_to_two_places(self):
        order = Order(order_id="D818-1", subtotal=22, delivery_fee="3.5", total=25.5)

        assert (order.subtotal, order.delivery_fee, order.total) == ("22.00", "3.50", "25.50")

    def test_accepts_storefront_camel_case(self):
        order = Order.model_validate(
            {
                "orderId": "D818-1",
                "user": {"name": "Ada", "email": "ada@example.com", "phone": None},
                "items": [{"name": "Jollof Rice", "quantity": 2, "price": 8.5}],
                "deliveryOption": "delivery",
                "deliveryDetails": {"address": "12 Market Street", "phone": "07700900999"},
                "deliveryFee": "3.50",
                "total": "20.50",
                "withinRadius": False,
            }
        )

        assert order.user.phone == ""
        assert order.contact_phone == "07700900999"
        assert order.within_radius is False
        assert order.items[0].line_total == "17.00"

    def test_to_json_uses_camel_case(self, sample_order):
        data = sample_order.to_json()

        assert data["orderId"] == sample_order.order_id
        assert data["deliveryFee"] == "3.50"
        assert data["deliveryOption"] == "delivery"
        assert data["deliveryDetails"]["postcode"] == "NG1 5FS"

    def test_order_id_required(self):
        with pytest.raises(ValidationError):
            Order(order_id="")


class TestCartItem:
    def test_blank_name_defaults(self):
        assert CartItem(name=None, quantity=1, price=2).name == "Item"

    @pytest.mark.parametrize(("quantity", "price"), [(0, 5), (1, 0), (-1, 5), (1, -2)])
    def test_rejects_non_positive(self, quantity, price):
        with pytest.raises(ValidationError):
            CartItem(name="Jollof Rice", quantity=quantity, price=price)


class TestStripeViews:
    def test_session_from_stripe_with_expanded_payment_intent(self):
        session = CheckoutSession.from_stripe(
            {
                "id": "cs_1",
                "payment_status": "paid",
                "payment_intent": {"id": "pi_1", "object": "payment_intent"},
                "amount_total": 2550,
                "customer_details": {"email": "ada@example.com"},
                "metadata": {"orderId": "D818-1"},
            }
        )

        assert session.payment_intent_id == "pi_1"
        assert session.customer_email == "ada@example.com"
        assert session.order_id == "D818-1"
        assert session.is_paid

    def test_session_defaults_to_unpaid(self):
        session = CheckoutSession.from_stripe({"id": "cs_1"})

        assert not session.is_paid
        assert session.payment_intent_id is None
        assert session.metadata == {}

    def test_line_item_from_stripe(self):
        item = LineItem.from_stripe({"description": "Puff Puff", "quantity": 3, "amount_total": 600})

        assert item == LineItem(description="Puff Puff", quantity=3, amount_total=600)

    def test_event_from_stripe(self, checkout_completed_payload):
        event = PaymentEvent.from_stripe(checkout_completed_payload)

        assert event.is_checkout_completed
        assert event.checkout_session().amount_total == 2550

    def test_other_event_type(self):
        event = PaymentEvent.from_stripe({"id": "evt_1", "type": "charge.refunded", "data": {"object": {}}})

        assert not event.is_checkout_completed


class TestOrderingError:
    def test_to_response(self):
        error = OrderingError(ErrorCode.TOTAL_MISMATCH, details={"order_total": "20.00"})

        response = error.to_response()

        assert response.success is False
        assert response.error_code == ErrorCode.TOTAL_MISMATCH
        assert response.message == "Total mismatch"
        assert response.details == {"order_total": "20.00"}
        assert str(error) == "Total mismatch"
