from sqlalchemy import Column, String, DateTime, Index
from models.base import Base, BigIntPK, JSONPayload, utcnow


class StoreEvent(Base):
    """
    Append-only record of one inbound webhook delivery.

    The payload is stored exactly as received. Rows are never updated
    or deleted.
    """
    __tablename__ = "store_events"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)

    type = Column(String(50), nullable=False, index=True)
    payload = Column(JSONPayload, nullable=False)
    store_id = Column(String(100), nullable=False, index=True)

    received_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True
    )

    __table_args__ = (
        Index("idx_event_store_type_received", "store_id", "type", "received_at"),
    )
