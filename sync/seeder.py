"""
Seed a store with synthetic products, customers and orders.

Everything goes through the remote API. The seeder never touches the
local store; the next reconciliation run mirrors what it created.
"""

import asyncio
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional
from core.exceptions import RemoteAPIError
from sync.client import ShopifyClient, EntityType
import logging

logger = logging.getLogger(__name__)

VENDORS = ["Acme Co", "Globex", "Umbrella", "Wayne Enterprises", "Soylent"]
PRODUCT_TYPES = ["T-Shirt", "Mug", "Sticker", "Poster", "Hoodie", "Cap", "Bag"]
ADJECTIVES = ["Classic", "Premium", "Eco", "Limited", "Vintage", "Modern", "Essential"]
FIRST_NAMES = ["Alex", "Sam", "Jordan", "Taylor", "Casey", "Riley", "Avery", "Morgan", "Quinn", "Charlie"]
LAST_NAMES = ["Smith", "Johnson", "Brown", "Taylor", "Anderson", "Thomas", "Jackson", "White", "Harris", "Martin"]
SEED_TAGS = ["seed", "dummy", "automated"]


@dataclass
class SeedReport:
    """What a seeding session created and how many creates failed"""
    products: List[Dict[str, Any]] = field(default_factory=list)
    customers: List[Dict[str, Any]] = field(default_factory=list)
    orders: List[Dict[str, Any]] = field(default_factory=list)
    failures: Dict[str, int] = field(
        default_factory=lambda: {e.value: 0 for e in EntityType}
    )


class Seeder:
    """
    Best-effort synthetic data generator.

    Each entity is created with its own request, followed by a fixed
    delay to stay under the API rate limit. A failed create is logged and
    counted; the batch carries on.
    """

    def __init__(
        self,
        client: ShopifyClient,
        request_delay: float = 0.3,
        order_delay: float = 0.5,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.client = client
        self.request_delay = request_delay
        self.order_delay = order_delay
        self.rng = rng or random.Random()
        self.sleep = sleep

    # ------------------------------------------------------------------
    # Generators
    # ------------------------------------------------------------------

    def random_price(self, low: float = 5, high: float = 200) -> str:
        return f"{self.rng.uniform(low, high):.2f}"

    def random_date_in_last_30_days(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now(timezone.utc)
        return now - timedelta(seconds=self.rng.uniform(0, 30 * 24 * 3600))

    def generate_product(self, index: int) -> Dict[str, Any]:
        title = f"{self.rng.choice(ADJECTIVES)} {self.rng.choice(PRODUCT_TYPES)} #{index + 1}"
        return {
            "title": title,
            "body_html": f"<p>{title} - automatically seeded product.</p>",
            "vendor": self.rng.choice(VENDORS),
            "product_type": self.rng.choice(PRODUCT_TYPES),
            "status": "active",
            "variants": [
                {
                    "price": self.random_price(),
                    "sku": f"SKU-{int(time.time() * 1000)}-{index}",
                    "inventory_management": "shopify",
                }
            ],
            "tags": list(SEED_TAGS),
        }

    def generate_customer(self, index: int) -> Dict[str, Any]:
        first = self.rng.choice(FIRST_NAMES)
        last = self.rng.choice(LAST_NAMES)
        stamp = int(time.time() * 1000)
        return {
            "first_name": first,
            "last_name": last,
            "email": f"seed+{first.lower()}.{last.lower()}.{stamp}_{index}@example.com",
            "verified_email": True,
            "accepts_marketing": False,
            "tags": ",".join(SEED_TAGS),
        }

    def generate_order(
        self,
        customer: Dict[str, Any],
        products: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Order for a known customer with 1-3 random products"""
        chosen = [self.rng.choice(products) for _ in range(self.rng.randint(1, 3))]
        line_items = [
            {
                "variant_id": product["variants"][0]["id"],
                "quantity": self.rng.randint(1, 3),
            }
            for product in chosen
        ]
        return {
            "email": customer.get("email"),
            "customer": {"id": customer["id"]},
            "line_items": line_items,
            "financial_status": "paid",
            "fulfillment_status": "fulfilled",
            "created_at": self.random_date_in_last_30_days().isoformat(),
            "tags": ",".join(SEED_TAGS),
        }

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    async def seed(self, num_products: int, num_customers: int, num_orders: int) -> SeedReport:
        report = SeedReport()
        logger.info(
            f"Seeding {num_products} products, {num_customers} customers "
            f"and {num_orders} orders to shop {self.client.config.shop_name}"
        )

        await self.seed_products(num_products, report)
        await self.seed_customers(num_customers, report)
        await self.seed_orders(num_orders, report)

        logger.info(
            f"Seeding complete - created {len(report.products)} products, "
            f"{len(report.customers)} customers, {len(report.orders)} orders; "
            f"failures: {report.failures}"
        )
        return report

    async def seed_products(self, count: int, report: SeedReport):
        for i in range(count):
            product = await self._create(
                EntityType.PRODUCTS, self.generate_product(i), i, count, report
            )
            if product is None:
                continue
            report.products.append(product)
            logger.info(f"Created product {i + 1}/{count}: {product.get('title')} (id: {product.get('id')})")
            await self.sleep(self.request_delay)

    async def seed_customers(self, count: int, report: SeedReport):
        for i in range(count):
            customer = await self._create(
                EntityType.CUSTOMERS, self.generate_customer(i), i, count, report
            )
            if customer is None:
                continue
            report.customers.append(customer)
            logger.info(
                f"Created customer {i + 1}/{count}: "
                f"{customer.get('first_name')} {customer.get('last_name')} (id: {customer.get('id')})"
            )
            await self.sleep(self.request_delay)

    async def seed_orders(self, count: int, report: SeedReport):
        if count and (not report.customers or not report.products):
            logger.warning(
                "Skipping order seeding: orders need at least one created "
                "customer and one created product"
            )
            return

        for i in range(count):
            customer = self.rng.choice(report.customers)
            try:
                payload = self.generate_order(customer, report.products)
            except (KeyError, IndexError) as e:
                report.failures[EntityType.ORDERS.value] += 1
                logger.error(f"Failed to build order {i + 1}/{count}: missing {e} in created records")
                continue

            order = await self._create(EntityType.ORDERS, payload, i, count, report)
            if order is None:
                continue
            report.orders.append(order)
            logger.info(f"Created order {i + 1}/{count}: id={order.get('id')}, customer={customer.get('email')}")
            await self.sleep(self.order_delay)

    async def _create(
        self,
        entity_type: EntityType,
        payload: Dict[str, Any],
        index: int,
        count: int,
        report: SeedReport
    ) -> Optional[Dict[str, Any]]:
        try:
            return await self.client.create_entity(entity_type, payload)
        except RemoteAPIError as e:
            report.failures[entity_type.value] += 1
            logger.error(
                f"Failed to create {entity_type.singular} {index + 1}/{count}: "
                f"status={e.status_code} body={e.response_body or e.message}"
            )
            return None
