from sqlalchemy import Column, String, Enum, DateTime, Float, Integer, Text, Index
import uuid
from models.base import Base, BigIntPK, SyncStatus, utcnow


class SyncRun(Base):
    """
    Tracks metadata for each reconciliation run.

    Purpose:
    - Audit trail of all runs
    - Health reporting (last run status)
    - Error tracking and debugging
    """
    __tablename__ = "sync_runs"

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    run_id = Column(String(36), default=lambda: str(uuid.uuid4()), unique=True, nullable=False)

    store_id = Column(String(100), nullable=False, index=True)
    status = Column(Enum(SyncStatus), default=SyncStatus.RUNNING, nullable=False, index=True)

    # Timestamps
    started_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Float, nullable=True)

    # Statistics
    products_synced = Column(Integer, default=0)
    customers_synced = Column(Integer, default=0)
    customers_created_inline = Column(Integer, default=0)
    orders_synced = Column(Integer, default=0)
    order_items_synced = Column(Integer, default=0)
    line_items_skipped = Column(Integer, default=0)

    # Error tracking
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_sync_run_store_started", "store_id", "started_at"),
    )
