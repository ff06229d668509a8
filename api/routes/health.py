"""
Health check endpoint with database and last sync status
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_store_id
from schemas.api import HealthCheckResponse, SyncRunSummary
from sync.gateway import StoreGateway
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    store_id: str = Depends(get_store_id),
):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Summary of the latest reconciliation run for this store
    """
    db_connected = False
    last_sync = None

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {str(e)}")

    if db_connected:
        try:
            run = await StoreGateway(db, store_id).latest_sync_run()
            if run is not None:
                last_sync = SyncRunSummary.model_validate(run)
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch last sync run: {str(e)}")

    return HealthCheckResponse(
        database_connected=db_connected,
        store_id=store_id,
        last_sync=last_sync,
    )
