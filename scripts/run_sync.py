"""
Script to run one reconciliation for the configured store
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings, usage
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from sync.reconciler import run_reconciliation

logger = logging.getLogger(__name__)


async def main() -> int:
    try:
        config = settings.store_config()
    except ConfigurationError as e:
        logger.error(e.message)
        logger.error(usage("run_sync.py"))
        return 1

    try:
        stats = await run_reconciliation(config, settings.DATABASE_URL)
    except Exception as e:
        logger.error(f"Sync failed: {e}")
        return 1

    logger.info(f"Sync complete: {stats.as_counters()}")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main()))
