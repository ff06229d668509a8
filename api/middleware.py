import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Shopify sends a unique id with every webhook delivery
DELIVERY_ID_HEADER = "X-Shopify-Webhook-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id and reports how long it took.

    Webhook deliveries reuse the sender's delivery id so a stored event
    can be traced back to the call that produced it. Every delivery gets a
    "received" and a "handled" log line.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(DELIVERY_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        is_webhook = request.url.path.startswith("/webhook")
        started = time.perf_counter()

        if is_webhook:
            topic = request.headers.get("X-Shopify-Topic", "-")
            logger.info(f"[{request_id}] Received webhook {request.url.path} (topic: {topic})")

        response: Response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        if is_webhook:
            logger.info(f"[{request_id}] Handled with {response.status_code} in {elapsed_ms}ms")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-API-Latency-ms"] = str(elapsed_ms)
        return response
