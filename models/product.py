from sqlalchemy import Column, String, Numeric, DateTime, Index
from models.base import Base, BigIntPK, utcnow


class Product(Base):
    """
    Local mirror of a remote product.

    Price comes from the first variant. Rows are refreshed in place on
    every sync and never deleted.
    """
    __tablename__ = "products"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    shopify_id = Column(String(64), nullable=False, unique=True)

    title = Column(String(500), nullable=False)
    vendor = Column(String(255), nullable=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)

    store_id = Column(String(100), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_product_store_vendor", "store_id", "vendor"),
    )
