"""
Local store gateway: upserts keyed by external id, relation lookups,
webhook event rows and the reconciliation run ledger.
"""

from typing import Any, Dict, Optional
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import JSON, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects import postgresql, sqlite
from models.product import Product
from models.customer import Customer
from models.order import Order, OrderItem
from models.event import StoreEvent
from models.sync_run import SyncRun
from models.base import SyncStatus
from schemas.records import ProductRecord, CustomerRecord, OrderRecord
from core.exceptions import UpsertError, EventPersistenceError, StoreError
import logging

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class StoreGateway:
    """
    Write path into the local store for one store id.

    Ensures:
    - One row per external id (INSERT ... ON CONFLICT DO UPDATE)
    - Every row is tagged with the owning store id
    - Database errors surface as typed StoreError subclasses

    Upserts only flush. Callers decide the transaction boundary with
    commit(), so an order and its items can be committed together.
    """

    def __init__(self, db_session: AsyncSession, store_id: str):
        self.db = db_session
        self.store_id = store_id

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def commit(self):
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Commit failed", original_exception=e)

    async def rollback(self):
        await self.db.rollback()

    # ------------------------------------------------------------------
    # Upserts
    # ------------------------------------------------------------------

    async def upsert_product(self, record: ProductRecord) -> Product:
        return await self._upsert(
            Product,
            index_elements=["shopify_id"],
            values={
                "shopify_id": record.shopify_id,
                "title": record.title,
                "vendor": record.vendor,
                "price": record.price,
                "store_id": self.store_id,
            },
            update_fields=["title", "vendor", "price", "store_id"],
            external_id=record.shopify_id,
        )

    async def upsert_customer(self, record: CustomerRecord) -> Customer:
        return await self._upsert(
            Customer,
            index_elements=["shopify_id"],
            values={
                "shopify_id": record.shopify_id,
                "first_name": record.first_name,
                "last_name": record.last_name,
                "email": record.email,
                "store_id": self.store_id,
            },
            update_fields=["first_name", "last_name", "email", "store_id"],
            external_id=record.shopify_id,
        )

    async def upsert_order(self, record: OrderRecord, customer_id: Optional[int]) -> Order:
        return await self._upsert(
            Order,
            index_elements=["shopify_id"],
            values={
                "shopify_id": record.shopify_id,
                "total_price": record.total_price,
                "created_at": record.created_at,
                "customer_id": customer_id,
                "store_id": self.store_id,
            },
            update_fields=["total_price", "created_at", "customer_id", "store_id"],
            external_id=record.shopify_id,
        )

    async def upsert_order_item(
        self,
        order: Order,
        product: Product,
        quantity: int,
        price: Decimal
    ) -> OrderItem:
        """
        Upsert the line for an (order, product) pair.

        Only quantity and price change on conflict. The references are
        fixed by the key.
        """
        key = OrderItem.key_for(order.id, product.id)
        return await self._upsert(
            OrderItem,
            index_elements=["id"],
            values={
                "id": key,
                "quantity": quantity,
                "price": price,
                "order_id": order.id,
                "product_id": product.id,
                "store_id": self.store_id,
            },
            update_fields=["quantity", "price", "store_id"],
            external_id=key,
        )

    async def _upsert(
        self,
        model,
        index_elements,
        values: Dict[str, Any],
        update_fields,
        external_id: str
    ):
        now = datetime.now(timezone.utc)
        if "updated_at" in model.__table__.c:
            values = {**values, "updated_at": now}
            update_fields = [*update_fields, "updated_at"]

        insert = self._insert_for()
        stmt = insert(model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=index_elements,
            set_={field: stmt.excluded[field] for field in update_fields}
        ).returning(model)

        try:
            result = await self.db.scalars(
                stmt, execution_options={"populate_existing": True}
            )
            return result.one()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpsertError(
                f"Upsert into {model.__tablename__} failed",
                context={
                    "table_name": model.__tablename__,
                    "external_id": external_id,
                    "store_id": self.store_id,
                },
                original_exception=e
            )

    def _insert_for(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise StoreError(
                f"Upsert is not supported on the {dialect} dialect",
                context={"dialect": dialect}
            )

    # ------------------------------------------------------------------
    # Relation lookups
    # ------------------------------------------------------------------

    async def get_product(self, shopify_id: str) -> Optional[Product]:
        result = await self.db.execute(
            select(Product).where(Product.shopify_id == shopify_id)
        )
        return result.scalar_one_or_none()

    async def get_customer(self, shopify_id: str) -> Optional[Customer]:
        result = await self.db.execute(
            select(Customer).where(Customer.shopify_id == shopify_id)
        )
        return result.scalar_one_or_none()

    async def ensure_customer(self, record: CustomerRecord) -> tuple:
        """
        Find a customer by external id, creating it when absent.

        An existing row is returned untouched. The customer sync owns
        updates; this only fills the gap for customers first seen on an
        order.

        Returns:
            (customer, created) tuple
        """
        customer = await self.get_customer(record.shopify_id)
        if customer is not None:
            return customer, False

        customer = Customer(
            shopify_id=record.shopify_id,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            store_id=self.store_id,
        )
        self.db.add(customer)
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise UpsertError(
                "Inline customer creation failed",
                context={
                    "table_name": Customer.__tablename__,
                    "external_id": record.shopify_id,
                    "store_id": self.store_id,
                },
                original_exception=e
            )
        return customer, True

    # ------------------------------------------------------------------
    # Webhook events
    # ------------------------------------------------------------------

    async def record_event(self, event_type: str, payload: Any) -> StoreEvent:
        """Append one event row and commit it"""
        event = StoreEvent(
            type=event_type,
            # A JSON null body is stored as JSON null, not SQL NULL
            payload=JSON.NULL if payload is None else payload,
            store_id=self.store_id,
        )
        self.db.add(event)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise EventPersistenceError(
                f"Could not store {event_type} event",
                context={"event_type": event_type, "store_id": self.store_id},
                original_exception=e
            )
        return event

    # ------------------------------------------------------------------
    # Run ledger
    # ------------------------------------------------------------------

    async def start_sync_run(self) -> SyncRun:
        run = SyncRun(store_id=self.store_id, status=SyncStatus.RUNNING)
        self.db.add(run)
        await self.commit()
        return run

    async def complete_sync_run(
        self,
        run: SyncRun,
        status: SyncStatus,
        counters: Dict[str, int],
        error_message: Optional[str] = None
    ):
        # A rollback earlier in the run expires every loaded instance
        await self.db.refresh(run)

        completed_at = datetime.now(timezone.utc)
        started_at = run.started_at
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)

        run.status = status
        run.completed_at = completed_at
        run.duration_seconds = (completed_at - started_at).total_seconds()
        run.error_message = error_message
        for name, value in counters.items():
            setattr(run, name, value)

        self.db.add(run)
        await self.commit()

    async def latest_sync_run(self) -> Optional[SyncRun]:
        result = await self.db.execute(
            select(SyncRun)
            .where(SyncRun.store_id == self.store_id)
            .order_by(SyncRun.started_at.desc(), SyncRun.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
