"""
Webhook endpoints. Each delivery is stored verbatim as one event row.
"""

import json
from typing import Any
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_store_id, verify_webhook_signature
from core.exceptions import EventPersistenceError
from models.base import EventType
from sync.gateway import StoreGateway
import logging

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/webhook",
    tags=["Webhooks"],
    dependencies=[Depends(verify_webhook_signature)],
)


async def read_json_payload(request: Request) -> Any:
    """
    Decode the raw body as JSON.

    Any JSON value is accepted, including null. Bodies that are not
    declared as JSON get a 415; undecodable bodies get a 422.
    """
    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if media_type != "application/json":
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Webhook body must be sent as application/json"
        )

    try:
        return await request.json()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Webhook body is not valid JSON"
        )


async def save_event(
    event_type: EventType,
    payload: Any,
    db: AsyncSession,
    store_id: str
) -> PlainTextResponse:
    logger.info(f"Payload: {json.dumps(payload, indent=2, default=str)}")

    gateway = StoreGateway(db, store_id)
    try:
        await gateway.record_event(event_type.value, payload)
    except EventPersistenceError as e:
        logger.error(f"Error saving {event_type.value} event: {e}")
        return PlainTextResponse("error", status_code=500)

    logger.info(f"{event_type.value} event saved")
    return PlainTextResponse("ok", status_code=200)


@router.post("/cart", response_class=PlainTextResponse)
async def cart_created(
    payload: Any = Depends(read_json_payload),
    db: AsyncSession = Depends(get_db),
    store_id: str = Depends(get_store_id),
):
    return await save_event(EventType.CART_CREATED, payload, db, store_id)


@router.post("/checkout", response_class=PlainTextResponse)
async def checkout_created(
    payload: Any = Depends(read_json_payload),
    db: AsyncSession = Depends(get_db),
    store_id: str = Depends(get_store_id),
):
    return await save_event(EventType.CHECKOUT_CREATED, payload, db, store_id)


@router.post("/cart/update", response_class=PlainTextResponse)
async def cart_updated(
    payload: Any = Depends(read_json_payload),
    db: AsyncSession = Depends(get_db),
    store_id: str = Depends(get_store_id),
):
    return await save_event(EventType.CART_UPDATED, payload, db, store_id)


@router.post("/checkout/complete", response_class=PlainTextResponse)
async def checkout_completed(
    payload: Any = Depends(read_json_payload),
    db: AsyncSession = Depends(get_db),
    store_id: str = Depends(get_store_id),
):
    return await save_event(EventType.CHECKOUT_COMPLETED, payload, db, store_id)
