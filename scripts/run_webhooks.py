"""
Serve the webhook receiver
"""

import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

import uvicorn
from core.config import settings, usage
from core.exceptions import ConfigurationError
from core.logging import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    try:
        settings.require_store_id()
    except ConfigurationError as e:
        logger.error(e.message)
        logger.error(usage("run_webhooks.py", with_token=False))
        return 1

    logger.info(
        f"Webhook server running at http://{settings.WEBHOOK_HOST}:{settings.WEBHOOK_PORT}/webhook"
    )
    uvicorn.run(
        "api.main:app",
        host=settings.WEBHOOK_HOST,
        port=settings.WEBHOOK_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(main())
