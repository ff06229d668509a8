"""
FastAPI application for inbound store webhooks
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from api.middleware import RequestContextMiddleware
from api.routes import health, webhooks
from core.config import settings
from core.database import build_engine, build_session_maker
import logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """One engine per process, disposed on shutdown"""
    logger.info("Starting webhook receiver")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(
        f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}"
    )

    engine = build_engine(settings.DATABASE_URL)
    app.state.session_maker = build_session_maker(engine)
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Shutting down webhook receiver")


app = FastAPI(
    title="Store Webhook Receiver",
    description="Receives cart and checkout webhooks and stores them as events",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(webhooks.router)
