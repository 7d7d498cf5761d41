"""Scheduler service - runs the daily reminder sweep.

Each run is a cold start: nothing is carried between runs.
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config import settings
from .reminders import ReminderSweep, reminder_sweep

logger = logging.getLogger(__name__)

# A sweep missed by less than this (e.g. during a restart) still runs
MISFIRE_GRACE_SECONDS = 3600


class SchedulerService:
    """Service for scheduling periodic jobs."""

    def __init__(self, sweep: ReminderSweep = reminder_sweep):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.sweep = sweep
        self._running = False

    def reminder_trigger(self) -> CronTrigger:
        return CronTrigger(
            hour=settings.reminder_hour,
            minute=settings.reminder_minute,
            timezone=settings.timezone,
        )

    def start(self):
        """Start the scheduler."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler(timezone=settings.timezone)

        if settings.reminder_enabled:
            self.scheduler.add_job(
                self._run_reminders,
                trigger=self.reminder_trigger(),
                id="daily_reminders",
                replace_existing=True,
                max_instances=1,
                misfire_grace_time=MISFIRE_GRACE_SECONDS,
            )

        self.scheduler.start()
        self._running = True
        logger.info(
            f"Scheduler started (reminders at {settings.reminder_hour:02d}:{settings.reminder_minute:02d} "
            f"{settings.timezone}, enabled={settings.reminder_enabled})"
        )

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    async def _run_reminders(self):
        try:
            await self.sweep.run()
        except Exception as e:
            logger.error(f"Error running reminder sweep: {e}")


# Global instance
scheduler_service = SchedulerService()
