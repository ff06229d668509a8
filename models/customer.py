from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from models.base import Base, BigIntPK, utcnow


class Customer(Base):
    """
    Local mirror of a remote customer.

    Besides the customer sync itself, order sync creates a row here when
    an order embeds a customer that has not been seen before.
    """
    __tablename__ = "customers"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    shopify_id = Column(String(64), nullable=False, unique=True)

    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(320), nullable=True, index=True)

    store_id = Column(String(100), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    orders = relationship("Order", back_populates="customer")
