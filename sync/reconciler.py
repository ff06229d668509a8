"""
Reconciler - mirrors remote products, customers and orders into the local store.

One run walks the three collections in a fixed order:

1. Products
2. Customers
3. Orders, resolving each order's customer and each line item's product

Orders go last because they reference both of the others. Each record is
committed on its own, so a failure aborts the rest of the run but keeps
everything committed before it.
"""

from dataclasses import dataclass, asdict
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from core.config import StoreConfig
from core.database import session_scope
from core.exceptions import SyncException, ReconciliationError, StoreError
from models.base import SyncStatus
from models.sync_run import SyncRun
from sync.client import ShopifyClient, EntityType
from sync.gateway import StoreGateway
from sync.mappers import RecordMapper
import logging

logger = logging.getLogger(__name__)


@dataclass
class SyncStats:
    """
    Counters for one reconciliation run.

    order_items_synced counts stored rows, so two lines of one order for
    the same product count once.
    """
    products_synced: int = 0
    customers_synced: int = 0
    customers_created_inline: int = 0
    orders_synced: int = 0
    order_items_synced: int = 0
    line_items_skipped: int = 0

    def as_counters(self) -> dict:
        return asdict(self)


class Reconciler:
    """
    Orchestrates fetch → map → upsert for each entity type.

    Responsibilities:
    - Keep one local row per external id
    - Attach orders to customers, creating customers first seen on an order
    - Attach line items to products that already exist locally
    - Record the run in the sync_runs ledger
    """

    def __init__(
        self,
        client: ShopifyClient,
        gateway: StoreGateway,
        page_size: int = 50,
        mapper: Optional[RecordMapper] = None
    ):
        self.client = client
        self.gateway = gateway
        self.page_size = page_size
        self.mapper = mapper or RecordMapper()
        self.stats = SyncStats()

    async def run(self) -> SyncStats:
        """
        Execute one full reconciliation run.

        Returns:
            SyncStats for the run

        Raises:
            SyncException: the error that aborted the run
        """
        self.stats = SyncStats()
        sync_run = await self.gateway.start_sync_run()
        # Read before any rollback can expire the instance
        run_id = sync_run.run_id
        logger.info(f"Starting reconciliation run {run_id} for {self.gateway.store_id}")

        try:
            await self.sync_products()
            await self.sync_customers()
            await self.sync_orders()

        except SyncException as e:
            logger.error(
                f"Reconciliation run {run_id} failed: {e}",
                extra={"error_context": e.to_dict()}
            )
            await self._fail(sync_run, run_id, e.message)
            raise

        except Exception as e:
            logger.exception(f"Unexpected error in reconciliation run {run_id}")
            await self._fail(sync_run, run_id, str(e))
            raise ReconciliationError(
                "Unexpected error during reconciliation",
                context={"run_id": run_id, **self.stats.as_counters()},
                original_exception=e
            )

        await self.gateway.complete_sync_run(
            sync_run, SyncStatus.SUCCESS, self.stats.as_counters()
        )
        logger.info(
            f"Reconciliation run {run_id} complete - "
            f"Products: {self.stats.products_synced}, "
            f"Customers: {self.stats.customers_synced} "
            f"(+{self.stats.customers_created_inline} from orders), "
            f"Orders: {self.stats.orders_synced}, "
            f"Items: {self.stats.order_items_synced} "
            f"({self.stats.line_items_skipped} skipped)"
        )
        return self.stats

    async def _fail(self, sync_run: SyncRun, run_id: str, message: str):
        """
        Mark the run failed. A ledger write that fails too is logged and
        dropped so the error that aborted the run is the one raised.
        """
        try:
            await self.gateway.rollback()
            await self.gateway.complete_sync_run(
                sync_run, SyncStatus.FAILED, self.stats.as_counters(), error_message=message
            )
        except (SQLAlchemyError, StoreError) as e:
            logger.error(f"Could not mark reconciliation run {run_id} as failed: {e}")

    async def sync_products(self) -> int:
        logger.info("Syncing products...")
        products = await self.client.fetch_page(EntityType.PRODUCTS, self.page_size)

        for raw in products:
            record = self.mapper.product(raw)
            await self.gateway.upsert_product(record)
            await self.gateway.commit()
            self.stats.products_synced += 1

        logger.info(f"Synced {self.stats.products_synced} products")
        return self.stats.products_synced

    async def sync_customers(self) -> int:
        logger.info("Syncing customers...")
        customers = await self.client.fetch_page(EntityType.CUSTOMERS, self.page_size)

        for raw in customers:
            record = self.mapper.customer(raw)
            await self.gateway.upsert_customer(record)
            await self.gateway.commit()
            self.stats.customers_synced += 1

        logger.info(f"Synced {self.stats.customers_synced} customers")
        return self.stats.customers_synced

    async def sync_orders(self) -> int:
        logger.info("Syncing orders...")
        orders = await self.client.fetch_page(EntityType.ORDERS, self.page_size)

        for raw in orders:
            record = self.mapper.order(raw)

            customer_id = None
            if record.customer is not None:
                customer, created = await self.gateway.ensure_customer(record.customer)
                customer_id = customer.id
                if created:
                    self.stats.customers_created_inline += 1
                    logger.info(
                        f"Created customer {record.customer.shopify_id} "
                        f"from order {record.shopify_id}"
                    )

            order = await self.gateway.upsert_order(record, customer_id=customer_id)

            # Lines for the same product share one row; the last line wins
            item_keys = set()
            for item in record.line_items:
                product = None
                if item.product_shopify_id is not None:
                    product = await self.gateway.get_product(item.product_shopify_id)

                if product is None:
                    self.stats.line_items_skipped += 1
                    logger.debug(
                        f"Skipping line item of order {record.shopify_id}: "
                        f"product {item.product_shopify_id} not found locally"
                    )
                    continue

                order_item = await self.gateway.upsert_order_item(order, product, item.quantity, item.price)
                item_keys.add(order_item.id)

            await self.gateway.commit()
            self.stats.orders_synced += 1
            self.stats.order_items_synced += len(item_keys)

        logger.info(f"Synced {self.stats.orders_synced} orders")
        return self.stats.orders_synced


async def run_reconciliation(config: StoreConfig, database_url: str) -> SyncStats:
    """
    One isolated run: acquire a client and a store session, reconcile,
    release both.
    """
    async with ShopifyClient(config) as client:
        async with session_scope(database_url) as session:
            gateway = StoreGateway(session, store_id=config.shop_name)
            reconciler = Reconciler(client, gateway, page_size=config.page_size)
            return await reconciler.run()
