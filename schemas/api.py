"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional
from datetime import datetime, timezone
from models.base import SyncStatus


# ============================================================================
# Health Check Schemas
# ============================================================================

class SyncRunSummary(BaseModel):
    """Latest reconciliation run for the health check"""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    run_id: str
    status: SyncStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    products_synced: int = 0
    customers_synced: int = 0
    orders_synced: int = 0
    error_message: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Health check response model"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True,
                "store_id": "my-shop",
                "last_sync": None,
            }
        }
    )

    status: str = Field("healthy", description="Overall status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    database_connected: bool
    store_id: Optional[str] = None
    last_sync: Optional[SyncRunSummary] = None

    @model_validator(mode="after")
    def determine_status(self):
        """Derive overall health from the database check and the last run"""
        if not self.database_connected:
            self.status = "unhealthy"
        elif self.last_sync is not None and self.last_sync.status == SyncStatus.FAILED.value:
            self.status = "degraded"
        else:
            self.status = "healthy"
        return self
