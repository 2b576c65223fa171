"""
Scheduler Module

Background job that keeps the garage data snapshot warm.
Uses APScheduler to reload records from Supabase on a configurable interval.
"""

import os
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.services.garage_store import get_garage_store

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configuration from environment
REFRESH_ENABLED = os.getenv("REFRESH_ENABLED", "true").lower() == "true"
REFRESH_INTERVAL_MINUTES = int(os.getenv("REFRESH_INTERVAL_MINUTES", "15"))

# Create scheduler
scheduler = AsyncIOScheduler()


async def scheduled_snapshot_refresh():
    """Reload garage records (every N minutes)"""
    if not REFRESH_ENABLED:
        logger.info("[Scheduler] Refresh disabled, skipping snapshot refresh")
        return

    try:
        snapshot = get_garage_store().load_snapshot(force_refresh=True)
        logger.info(f"[Scheduler] Snapshot refresh complete: estimates={len(snapshot.estimates)}, "
                    f"skipped={snapshot.skipped_rows}")
    except Exception as e:
        logger.error(f"[Scheduler] Snapshot refresh failed: {e}")


def start_scheduler():
    """Start the background scheduler"""
    if not REFRESH_ENABLED:
        logger.info("[Scheduler] Refresh disabled via REFRESH_ENABLED env var")
        return

    logger.info(f"[Scheduler] Starting scheduler with snapshot refresh every {REFRESH_INTERVAL_MINUTES} minutes")

    scheduler.add_job(
        scheduled_snapshot_refresh,
        IntervalTrigger(minutes=REFRESH_INTERVAL_MINUTES),
        id="snapshot_refresh",
        name="Garage Snapshot Refresh",
        replace_existing=True
    )

    scheduler.start()
    logger.info("[Scheduler] Scheduler started successfully")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("[Scheduler] Scheduler stopped")
