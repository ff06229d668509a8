from sqlalchemy import Column, String, Numeric, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base import Base, BigIntPK, utcnow


class Order(Base):
    """
    Local mirror of a remote order.

    customer_id stays NULL when the remote order has no customer.
    created_at is the remote creation time, not the time of the sync.
    """
    __tablename__ = "orders"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    shopify_id = Column(String(64), nullable=False, unique=True)

    total_price = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=True, index=True)

    customer_id = Column(BigIntPK, ForeignKey("customers.id"), nullable=True, index=True)
    store_id = Column(String(100), nullable=False, index=True)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order")


class OrderItem(Base):
    """
    One product line of an order.

    The id is "{order.id}-{product.id}", so a re-sync of the same pair
    lands on the same row and only quantity and price change.
    """
    __tablename__ = "order_items"

    id = Column(String(64), primary_key=True)

    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(12, 2), nullable=False, default=0)

    order_id = Column(BigIntPK, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(BigIntPK, ForeignKey("products.id"), nullable=False, index=True)
    store_id = Column(String(100), nullable=False, index=True)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        Index("idx_order_item_pair", "order_id", "product_id", unique=True),
    )

    @staticmethod
    def key_for(order_id: int, product_id: int) -> str:
        return f"{order_id}-{product_id}"
