"""Startup tasks for long-running analytics workers."""

import asyncio
import logging
from contextlib import asynccontextmanager

from .background_tasks import SnapshotSchedulerService
from .container import AnalyticsServices

logger = logging.getLogger(__name__)


@asynccontextmanager
async def startup_tasks(services: AnalyticsServices):
    """Manage startup and shutdown of background services."""
    settings = services.settings
    if not settings.SNAPSHOT_SCHEDULER_ENABLED:
        logger.info("Snapshot scheduler disabled")
        yield None
        return

    # Startup
    logger.info("🚀 Starting background services...")
    scheduler = SnapshotSchedulerService(services.snapshots, settings.SNAPSHOT_INTERVAL_SECONDS)
    snapshot_task = asyncio.create_task(scheduler.start_auto_snapshots())

    try:
        yield scheduler
    finally:
        # Shutdown
        logger.info("🛑 Shutting down background services...")
        scheduler.stop_auto_snapshots()
        snapshot_task.cancel()

        try:
            await snapshot_task
        except asyncio.CancelledError:
            logger.info("✅ Snapshot task cancelled")

        logger.info("✅ Background services stopped")
