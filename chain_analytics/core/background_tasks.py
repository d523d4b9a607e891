"""Background tasks for periodic snapshot computation."""

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from .snapshot_service import SnapshotService

logger = logging.getLogger(__name__)


class SnapshotSchedulerService:
    """Recomputes yesterday's and today's snapshots on a fixed interval."""

    def __init__(
        self,
        snapshots: SnapshotService,
        interval_seconds: int = 3600,
        today: Optional[Callable[[], date]] = None,
    ):
        self.snapshots = snapshots
        self.is_running = False
        self.interval_seconds = interval_seconds
        self.retry_seconds = min(300, interval_seconds)
        self.today = today or (lambda: datetime.now().date())

    async def start_auto_snapshots(self):
        """Start the snapshot loop; returns once stop_auto_snapshots is called."""
        if self.is_running:
            logger.warning("Snapshot scheduler is already running")
            return

        self.is_running = True
        logger.info("🚀 Starting automatic snapshot service")

        while self.is_running:
            try:
                await self.run_once()
                logger.info(f"✅ Snapshots updated. Next run in {self.interval_seconds} seconds")
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"❌ Error in snapshot run: {e}")
                await asyncio.sleep(self.retry_seconds)

    def stop_auto_snapshots(self):
        """Stop the snapshot loop after the current run."""
        self.is_running = False
        logger.info("🛑 Stopping automatic snapshot service")

    async def run_once(self):
        """Recompute the snapshots for yesterday (late events) and today."""
        today = self.today()
        for day in (today - timedelta(days=1), today):
            await self.snapshots.create_daily_snapshot(day)
