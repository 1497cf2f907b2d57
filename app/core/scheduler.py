"""Background job scheduler for auto-locking shifts."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from app.checklist.autolock import auto_lock_due_shifts
from app.core.config import settings
from app.core.database import engine

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def auto_lock_job():
    """Background auto-lock job."""
    try:
        with Session(engine) as session:
            locked = auto_lock_due_shifts(session)
            if locked:
                logger.info(f"Auto-locked {len(locked)} shifts: {locked}")
    except Exception as e:
        logger.error(f"Auto-lock run failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        auto_lock_job,
        trigger=IntervalTrigger(minutes=settings.auto_lock_interval_minutes),
        id="auto_lock",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, checking lock times every {settings.auto_lock_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
