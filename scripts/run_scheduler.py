"""
Long-running process that reconciles the configured store on a cron schedule
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
from sync.scheduler import SyncScheduler

logger = logging.getLogger(__name__)


async def main() -> int:
    try:
        config = settings.store_config()
    except ConfigurationError as e:
        logger.error(e.message)
        logger.error(usage("run_scheduler.py"))
        return 1

    scheduler = SyncScheduler(config, settings.DATABASE_URL, cron=settings.SYNC_CRON)
    scheduler.start()
    logger.info("Scheduler service started")

    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    setup_logging()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Scheduler service stopped")
