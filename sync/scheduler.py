import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from core.config import StoreConfig
from sync.reconciler import run_reconciliation

logger = logging.getLogger(__name__)

JOB_ID = "store_sync"


class SyncScheduler:
    """
    Fires an isolated reconciliation run on a cron schedule.

    max_instances=1 makes APScheduler skip a firing while the previous
    run is still going; coalesce folds missed firings into one.
    """

    def __init__(self, config: StoreConfig, database_url: str, cron: str = "0 */6 * * *"):
        self.config = config
        self.database_url = database_url
        self.cron = cron
        self.scheduler = AsyncIOScheduler()

    async def run_sync_job(self):
        """Job to run one reconciliation"""
        logger.info("Scheduler: Running scheduled store sync")
        try:
            stats = await run_reconciliation(self.config, self.database_url)
            logger.info(f"Scheduler: Sync success - {stats.as_counters()}")
        except Exception as e:
            logger.error(f"Scheduler: Sync failed - {e}")

    def schedule(self):
        self.scheduler.add_job(
            self.run_sync_job,
            trigger=CronTrigger.from_crontab(self.cron),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

    def start(self):
        """Start the scheduler"""
        self.schedule()
        self.scheduler.start()
        logger.info(f"Sync scheduler started ({self.cron})")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Sync scheduler stopped")
