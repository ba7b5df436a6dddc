"""
Scheduled background jobs.
Used by the server scheduler. Each run_* returns a dict with "message" and "count".
"""
import logging
import os
from datetime import datetime, timezone, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.jobstores.mongodb import MongoDBJobStore
from pymongo import MongoClient

logger = logging.getLogger(__name__)

# Pending checkouts older than this are considered abandoned
STALE_ORDER_HOURS = 24


async def run_premium_expiry_sweep():
    try:
        from services.premium_service import premium_service
        count = await premium_service.expire_lapsed()
        logger.info(f"Premium expiry sweep completed: {count} profiles expired")
        return {"message": f"Premium access expired: {count}", "count": count}
    except Exception as e:
        logger.error(f"Premium expiry sweep failed: {e}")
        raise


async def run_stale_order_cleanup():
    try:
        from database import database
        from models import SubscriptionStatus
        db = database.get_db()
        now = datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=STALE_ORDER_HOURS)
        result = await db.subscriptions.update_many(
            {"status": SubscriptionStatus.PENDING.value, "created_at": {"$lt": cutoff}},
            {"$set": {"status": SubscriptionStatus.ABANDONED.value, "updated_at": now}}
        )
        count = result.modified_count
        logger.info(f"Stale order cleanup completed: {count} orders abandoned")
        return {"message": f"Stale orders abandoned: {count}", "count": count}
    except Exception as e:
        logger.error(f"Stale order cleanup failed: {e}")
        raise


def create_scheduler() -> AsyncIOScheduler:
    """Scheduler with a MongoDB job store so jobs survive restarts; memory store otherwise."""
    jobstores = {}
    mongo_url = os.environ.get("MONGO_URL")
    db_name = os.environ.get("DB_NAME", "toolhub")
    if mongo_url:
        try:
            jobstores["default"] = MongoDBJobStore(
                database=db_name,
                collection="scheduled_jobs",
                client=MongoClient(mongo_url)
            )
            logger.info(f"MongoDB job store configured: {db_name}.scheduled_jobs")
        except Exception as e:
            logger.warning(f"Failed to configure MongoDB job store, using memory store: {e}")
            jobstores = {}

    scheduler = AsyncIOScheduler(jobstores=jobstores)

    scheduler.add_job(
        run_premium_expiry_sweep,
        IntervalTrigger(hours=1),
        id="premium_expiry_sweep",
        name="Expire lapsed premium access",
        replace_existing=True
    )
    scheduler.add_job(
        run_stale_order_cleanup,
        CronTrigger(hour=3, minute=0, timezone="UTC"),
        id="stale_order_cleanup",
        name="Abandon stale pending orders",
        replace_existing=True
    )
    return scheduler
