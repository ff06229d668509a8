"""
FastAPI dependencies shared by the routes
"""

import base64
import hashlib
import hmac
from typing import AsyncIterator, Optional
from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from core.config import settings
import logging

logger = logging.getLogger(__name__)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Session from the process-wide session factory"""
    async with request.app.state.session_maker() as session:
        yield session


def get_store_id() -> str:
    return settings.require_store_id()


def get_webhook_secret() -> Optional[str]:
    return settings.WEBHOOK_SECRET


def compute_signature(secret: str, body: bytes) -> str:
    """base64(HMAC-SHA256(secret, body)), as sent in X-Shopify-Hmac-Sha256"""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


async def verify_webhook_signature(
    request: Request,
    x_shopify_hmac_sha256: Optional[str] = Header(None),
    secret: Optional[str] = Depends(get_webhook_secret),
):
    """
    Reject deliveries whose HMAC does not match the shared secret.

    Without a configured secret every delivery is accepted.
    """
    if not secret:
        return

    body = await request.body()
    expected = compute_signature(secret, body)
    if not x_shopify_hmac_sha256 or not hmac.compare_digest(expected, x_shopify_hmac_sha256):
        logger.warning(f"Rejected webhook with invalid signature: {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook signature"
        )
