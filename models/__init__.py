"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class, shared column types and enums
    product: Product mirror
    customer: Customer mirror
    order: Order mirror and its OrderItem lines
    event: Append-only webhook event rows
    sync_run: Reconciliation run ledger

Database Schema:
    Every table carries store_id. Products, customers and orders are keyed
    for upserts by their unique shopify_id; order items by the
    "{order.id}-{product.id}" pair. Payloads use JSONB on PostgreSQL and
    plain JSON elsewhere.

Usage:
    from models.product import Product
    from models.order import Order, OrderItem
    from models.base import SyncStatus, EventType

Relationships:
    - Customer → Order (one-to-many, nullable on the order side)
    - Order → OrderItem (one-to-many)
    - OrderItem → Product (many-to-one)
"""

from models.base import Base, SyncStatus, EventType
from models.product import Product
from models.customer import Customer
from models.order import Order, OrderItem
from models.event import StoreEvent
from models.sync_run import SyncRun

__all__ = [
    "Base",
    "SyncStatus",
    "EventType",
    "Product",
    "Customer",
    "Order",
    "OrderItem",
    "StoreEvent",
    "SyncRun",
]
