"""
Unit tests for record mapping
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from core.exceptions import NormalizationError
from sync.mappers import RecordMapper


@pytest.fixture
def mapper():
    return RecordMapper()


class TestProductMapping:

    def test_price_from_first_variant(self, mapper, remote_products):
        record = mapper.product(remote_products[0])

        assert record.shopify_id == "101"
        assert record.title == "Classic Mug #1"
        assert record.vendor == "Acme Co"
        assert record.price == Decimal("12.50")

    def test_product_without_variants(self, mapper):
        record = mapper.product({"id": 1, "title": "  Bare  "})

        assert record.price == Decimal("0")
        assert record.title == "Bare"

    def test_invalid_price(self, mapper):
        with pytest.raises(NormalizationError) as exc_info:
            mapper.product({"id": 7, "title": "X", "variants": [{"price": "abc"}]})

        assert exc_info.value.context["external_id"] == 7

    def test_missing_id(self, mapper):
        with pytest.raises(NormalizationError):
            mapper.product({"title": "No id"})


class TestCustomerMapping:

    def test_customer(self, mapper, remote_customers):
        record = mapper.customer(remote_customers[0])

        assert record.shopify_id == "201"
        assert record.email == "alex.smith@example.com"

    def test_customer_without_email(self, mapper):
        record = mapper.customer({"id": 5, "first_name": "Jo"})

        assert record.email is None
        assert record.last_name is None


class TestOrderMapping:

    def test_order_with_customer(self, mapper, remote_orders):
        record = mapper.order(remote_orders[0])

        assert record.shopify_id == "301"
        assert record.total_price == Decimal("55.00")
        assert record.created_at == datetime(2024, 7, 1, 10, 0, tzinfo=timezone.utc)
        assert record.customer.shopify_id == "201"
        assert record.customer.email == "guest-301@example.com"
        assert [item.product_shopify_id for item in record.line_items] == ["101", "102"]
        assert record.line_items[0].quantity == 2

    def test_embedded_customer_defaults(self, mapper, remote_orders):
        record = mapper.order(remote_orders[1])

        assert record.customer.first_name == "Sam"
        assert record.customer.last_name == ""
        assert record.customer.email == "guest-302@example.com"

    def test_order_without_customer(self, mapper, remote_orders):
        record = mapper.order(remote_orders[2])

        assert record.customer is None
        assert record.line_items == []

    def test_custom_line_without_product(self, mapper):
        record = mapper.order({
            "id": 9,
            "line_items": [{"product_id": None, "quantity": 1, "price": "3.00"}],
        })

        assert record.line_items[0].product_shopify_id is None
        assert record.created_at is None

    def test_negative_quantity(self, mapper):
        with pytest.raises(NormalizationError) as exc_info:
            mapper.order({"id": 9, "line_items": [{"product_id": 1, "quantity": -1}]})

        assert exc_info.value.context["entity_type"] == "orders"
