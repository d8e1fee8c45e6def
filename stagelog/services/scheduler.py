import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from stagelog.config import settings
from stagelog.services.pipeline import run_ingestion

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def start_scheduler(actor_id: str, adapter_key: str | None = None):
    """Start the daily ingestion scheduler."""
    hour, minute = settings.run_schedule.split(":")
    scheduler.add_job(
        _run_ingestion_job,
        "cron",
        hour=int(hour),
        minute=int(minute),
        args=[actor_id, adapter_key],
        id="daily_ingestion",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler started: daily ingestion at %s", settings.run_schedule)


def stop_scheduler():
    """Shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


async def _run_ingestion_job(actor_id: str, adapter_key: str | None):
    """Scheduled run. Safe to repeat: known performances are skipped."""
    logger.info("Scheduled ingestion starting")
    result = await run_ingestion(actor_id, adapter_key)
    logger.info(
        "Scheduled ingestion complete: %d created, %d errors",
        result.performances_created, len(result.errors),
    )
