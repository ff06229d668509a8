from sqlalchemy import BigInteger, Integer, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime, timezone
import enum

Base = declarative_base()

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

# JSONB on PostgreSQL, plain JSON elsewhere
JSONPayload = JSON().with_variant(JSONB, "postgresql")


def utcnow():
    return datetime.now(timezone.utc)


# ============================================================================
# ENUMS
# ============================================================================

class SyncStatus(str, enum.Enum):
    """Reconciliation run status"""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class EventType(str, enum.Enum):
    """Inbound webhook event types"""
    CART_CREATED = "cart_created"
    CHECKOUT_CREATED = "checkout_created"
    CART_UPDATED = "cart_updated"
    CHECKOUT_COMPLETED = "checkout_completed"
