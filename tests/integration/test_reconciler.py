"""
Integration tests for reconciliation runs against a real (SQLite) store
"""

import logging
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError
from core.exceptions import NormalizationError, ServerError, ReconciliationError
from models import Product, Customer, Order, OrderItem, SyncRun
from models.base import SyncStatus
from sync.client import EntityType
from sync.gateway import StoreGateway
from sync.reconciler import Reconciler


@pytest.fixture
def gateway(db_session):
    return StoreGateway(db_session, store_id="test-shop")


async def count(db_session, model):
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar()


async def order_by_shopify_id(db_session, shopify_id):
    result = await db_session.execute(select(Order).where(Order.shopify_id == shopify_id))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_full_run(fake_client, gateway, db_session):
    reconciler = Reconciler(fake_client, gateway, page_size=50)

    stats = await reconciler.run()

    assert stats.products_synced == 2
    assert stats.customers_synced == 1
    assert stats.customers_created_inline == 1
    assert stats.orders_synced == 3
    assert stats.order_items_synced == 3
    assert stats.line_items_skipped == 1

    # Products, then customers, then orders
    assert [entity for entity, _ in fake_client.calls] == [
        EntityType.PRODUCTS, EntityType.CUSTOMERS, EntityType.ORDERS
    ]
    assert all(size == 50 for _, size in fake_client.calls)

    run = await gateway.latest_sync_run()
    assert run.status == SyncStatus.SUCCESS
    assert run.orders_synced == 3
    assert run.error_message is None


@pytest.mark.asyncio
async def test_run_is_idempotent(fake_client, gateway, db_session):
    await Reconciler(fake_client, gateway).run()
    await Reconciler(fake_client, gateway).run()

    assert await count(db_session, Product) == 2
    assert await count(db_session, Customer) == 2
    assert await count(db_session, Order) == 3
    assert await count(db_session, OrderItem) == 3
    assert await count(db_session, SyncRun) == 2


@pytest.mark.asyncio
async def test_order_relations(fake_client, gateway, db_session):
    await Reconciler(fake_client, gateway).run()

    alex = await gateway.get_customer("201")
    first = await order_by_shopify_id(db_session, "301")
    assert first.customer_id == alex.id
    # The customer sync owns the email; the order placeholder never replaces it
    assert alex.email == "alex.smith@example.com"

    guest = await order_by_shopify_id(db_session, "303")
    assert guest.customer_id is None

    inline = await gateway.get_customer("202")
    assert inline.first_name == "Sam"
    assert inline.email == "guest-302@example.com"
    assert inline.store_id == "test-shop"


@pytest.mark.asyncio
async def test_unknown_product_line_skipped(fake_client, gateway, db_session):
    await Reconciler(fake_client, gateway).run()

    order = await order_by_shopify_id(db_session, "302")
    product = await gateway.get_product("101")
    items = (
        await db_session.execute(select(OrderItem).where(OrderItem.order_id == order.id))
    ).scalars().all()

    assert [item.id for item in items] == [f"{order.id}-{product.id}"]
    assert await gateway.get_product("999") is None


@pytest.mark.asyncio
async def test_price_updated_in_place(fake_client, gateway, remote_products, db_session):
    await Reconciler(fake_client, gateway).run()
    before = await gateway.get_product("101")
    product_id = before.id

    remote_products[0]["variants"][0]["price"] = "15.00"
    await Reconciler(fake_client, gateway).run()

    after = await gateway.get_product("101")
    assert after.id == product_id
    assert after.price == Decimal("15.00")
    assert await count(db_session, Product) == 2


@pytest.mark.asyncio
async def test_bad_record_aborts_run_and_keeps_committed_rows(
    client_factory, remote_products, remote_customers, remote_orders, gateway, db_session
):
    remote_orders[1]["total_price"] = "not-a-price"
    client = client_factory({
        EntityType.PRODUCTS: remote_products,
        EntityType.CUSTOMERS: remote_customers,
        EntityType.ORDERS: remote_orders,
    })

    with pytest.raises(NormalizationError):
        await Reconciler(client, gateway).run()

    assert await count(db_session, Product) == 2
    assert await count(db_session, Customer) == 1
    # Order 301 was committed before 302 failed; 303 was never reached
    assert await count(db_session, Order) == 1

    run = await gateway.latest_sync_run()
    assert run.status == SyncStatus.FAILED
    assert run.orders_synced == 1
    assert "orders" in run.error_message


@pytest.mark.asyncio
async def test_fetch_failure_marks_run_failed(client_factory, remote_products, gateway, db_session):
    client = client_factory(
        {EntityType.PRODUCTS: remote_products},
        errors={EntityType.CUSTOMERS: ServerError("Server error 503", status_code=503)},
    )

    with pytest.raises(ServerError):
        await Reconciler(client, gateway).run()

    assert await count(db_session, Product) == 2
    assert [entity for entity, _ in client.calls] == [EntityType.PRODUCTS, EntityType.CUSTOMERS]

    run = await gateway.latest_sync_run()
    assert run.status == SyncStatus.FAILED
    assert run.products_synced == 2


@pytest.mark.asyncio
async def test_unexpected_error_is_wrapped(client_factory, remote_products, gateway, db_session):
    client = client_factory(
        {EntityType.PRODUCTS: remote_products},
        errors={EntityType.CUSTOMERS: KeyError("customers")},
    )

    with pytest.raises(ReconciliationError) as exc_info:
        await Reconciler(client, gateway).run()

    assert isinstance(exc_info.value.original_exception, KeyError)
    run = await gateway.latest_sync_run()
    assert run.status == SyncStatus.FAILED


@pytest.mark.asyncio
async def test_repeated_product_lines_count_once(fake_client, remote_orders, gateway, db_session):
    remote_orders[0]["line_items"].append({"product_id": 101, "quantity": 3, "price": "11.00"})

    stats = await Reconciler(fake_client, gateway).run()

    order = await order_by_shopify_id(db_session, "301")
    product = await gateway.get_product("101")
    items = (
        await db_session.execute(select(OrderItem).where(OrderItem.order_id == order.id))
    ).scalars().all()

    assert len(items) == 2
    repeated = next(item for item in items if item.id == f"{order.id}-{product.id}")
    assert repeated.quantity == 3
    assert repeated.price == Decimal("11.00")
    assert stats.order_items_synced == 3
    assert stats.order_items_synced == await count(db_session, OrderItem)


@pytest.mark.asyncio
async def test_ledger_failure_keeps_original_error(
    client_factory, remote_products, gateway, db_session, monkeypatch, caplog
):
    client = client_factory(
        {EntityType.PRODUCTS: remote_products},
        errors={EntityType.CUSTOMERS: ServerError("Server error 503", status_code=503)},
    )
    lost = OperationalError("SELECT sync_runs", {}, Exception("connection lost"))
    monkeypatch.setattr(gateway, "complete_sync_run", AsyncMock(side_effect=lost))

    with caplog.at_level(logging.ERROR, logger="sync.reconciler"):
        with pytest.raises(ServerError):
            await Reconciler(client, gateway).run()

    assert "Could not mark reconciliation run" in caplog.text
    assert "connection lost" in caplog.text
