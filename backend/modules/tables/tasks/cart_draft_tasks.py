# backend/modules/tables/tasks/cart_draft_tasks.py

"""
Background sweep of expired cart drafts.

Runs periodically so dashboards learn about abandoned carts even when no
one reads the draft again.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import settings
from ..services.cart_draft_service import CartDraftService, cart_draft_service

logger = logging.getLogger(__name__)


class CartDraftSweepScheduler:
    """Scheduler for expiring cart drafts"""

    def __init__(self, service: Optional[CartDraftService] = None):
        self.service = service or cart_draft_service
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_running = False
        self.sweep_job_id = "cart_draft_sweep_job"

    def start(self):
        """Start the sweep scheduler"""
        if self.is_running:
            logger.warning("Cart draft sweep scheduler already running")
            return

        # A fresh scheduler binds to the loop that is running now
        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            func=self._sweep_task,
            trigger=IntervalTrigger(seconds=settings.cart_draft_sweep_interval_seconds),
            id=self.sweep_job_id,
            name="Cart Draft Sweep",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        self.is_running = True

        logger.info(
            f"Cart draft sweep scheduler started "
            f"(every {settings.cart_draft_sweep_interval_seconds}s)"
        )

    def stop(self):
        """Stop the scheduler"""
        if not self.is_running:
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Cart draft sweep scheduler stopped")

    async def _sweep_task(self):
        try:
            expired = await self.service.sweep()
            if expired:
                logger.info(f"Expired cart drafts for tables {expired}")
        except Exception as e:
            logger.error(f"Cart draft sweep failed: {e}", exc_info=True)


# Global scheduler instance
cart_draft_sweep_scheduler = CartDraftSweepScheduler()
