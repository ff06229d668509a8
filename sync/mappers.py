"""
Map raw Shopify records onto the local schema with Pydantic validation
"""

from typing import Dict, Any, Optional, Callable
from datetime import datetime
from decimal import Decimal, InvalidOperation
from schemas.records import ProductRecord, CustomerRecord, LineItemRecord, OrderRecord
from core.exceptions import NormalizationError


class RecordMapper:
    """
    Convert remote JSON into validated record schemas.

    Handles:
    - Remote ids to strings
    - Money strings to Decimal (missing or blank values become 0)
    - Timestamps to datetime
    - Placeholder email for customers embedded in orders without one
    """

    def product(self, raw: Dict[str, Any]) -> ProductRecord:
        return self._mapped("products", raw, self._product)

    def customer(self, raw: Dict[str, Any]) -> CustomerRecord:
        return self._mapped("customers", raw, self._customer)

    def order(self, raw: Dict[str, Any]) -> OrderRecord:
        return self._mapped("orders", raw, self._order)

    def _mapped(self, entity_type: str, raw: Dict[str, Any], build: Callable):
        try:
            return build(raw)
        except (ValueError, TypeError, AttributeError) as e:
            # pydantic.ValidationError is a ValueError
            raise NormalizationError(
                f"Could not map remote {entity_type} record",
                context={
                    "entity_type": entity_type,
                    "external_id": raw.get("id") if isinstance(raw, dict) else None
                },
                original_exception=e
            )

    def _product(self, raw: Dict[str, Any]) -> ProductRecord:
        variants = raw.get("variants") or []
        first_price = variants[0].get("price") if variants else None

        return ProductRecord(
            shopify_id=self._external_id(raw.get("id")),
            title=raw.get("title") or "",
            vendor=raw.get("vendor"),
            price=self._parse_decimal(first_price),
        )

    def _customer(self, raw: Dict[str, Any]) -> CustomerRecord:
        return CustomerRecord(
            shopify_id=self._external_id(raw.get("id")),
            first_name=raw.get("first_name"),
            last_name=raw.get("last_name"),
            email=raw.get("email"),
        )

    def _order(self, raw: Dict[str, Any]) -> OrderRecord:
        order_id = self._external_id(raw.get("id"))

        customer = None
        embedded = raw.get("customer") or {}
        if embedded.get("id") is not None:
            customer = CustomerRecord(
                shopify_id=self._external_id(embedded["id"]),
                first_name=embedded.get("first_name") or "",
                last_name=embedded.get("last_name") or "",
                email=embedded.get("email") or f"guest-{order_id}@example.com",
            )

        line_items = [
            LineItemRecord(
                product_shopify_id=self._external_id(item.get("product_id")),
                quantity=item.get("quantity") or 0,
                price=self._parse_decimal(item.get("price")),
            )
            for item in raw.get("line_items") or []
        ]

        return OrderRecord(
            shopify_id=order_id,
            total_price=self._parse_decimal(raw.get("total_price")),
            created_at=self._parse_datetime(raw.get("created_at")),
            customer=customer,
            line_items=line_items,
        )

    @staticmethod
    def _external_id(value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @staticmethod
    def _parse_decimal(value: Any) -> Decimal:
        if value is None or value == "":
            return Decimal("0")
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Not a decimal amount: {value!r}")

    @staticmethod
    def _parse_datetime(value: Any) -> Optional[datetime]:
        if not value:
            return None
        if isinstance(value, datetime):
            return value
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
