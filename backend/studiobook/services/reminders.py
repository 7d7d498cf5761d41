"""Reminder sweep - notify clients of accepted appointments in the next days.

The sweep keeps no record of what it already reminded, so running it twice
on the same day sends the reminders twice.
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import async_session
from ..models import Appointment
from ..models.appointment import STATUS_ACCEPTED
from ..utils.timeutils import days_ahead_window, utcnow
from .notifier import NotificationDispatcher, notification_dispatcher

logger = logging.getLogger(__name__)

REMINDER_DAYS_AHEAD = 2
REMINDER_TITLE = "Appointment Reminder"
REMINDER_CATEGORY = "reminder"


def reminder_body(scenario_name: Optional[str]) -> str:
    return f"Remember your upcoming appointment at {scenario_name or 'the studio'}"


class ReminderSweep:
    """Finds upcoming accepted appointments and reminds their clients."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = async_session,
        dispatcher: NotificationDispatcher = notification_dispatcher,
    ):
        self.session_factory = session_factory
        self.dispatcher = dispatcher

    async def upcoming_appointments(self, now: datetime) -> List[Appointment]:
        start, end = days_ahead_window(now, REMINDER_DAYS_AHEAD)
        async with self.session_factory() as session:
            result = await session.execute(
                select(Appointment).where(
                    Appointment.date >= start,
                    Appointment.date <= end,
                    Appointment.request_status == STATUS_ACCEPTED,
                )
            )
            return list(result.scalars().all())

    async def _remind(self, appointment: Appointment) -> bool:
        try:
            tokens = await self.dispatcher.active_tokens(appointment.client_uid)
            if not tokens:
                return False
            await self.dispatcher.dispatch(
                appointment.client_uid,
                REMINDER_TITLE,
                REMINDER_CATEGORY,
                reminder_body(appointment.scenario_name),
                tokens=tokens,
            )
            return True
        except Exception as e:
            logger.error(f"Error sending reminder for appointment {appointment.id}: {e}")
            return False

    async def run(self, now: Optional[datetime] = None) -> int:
        """Run one sweep. Returns the number of clients reminded."""
        now = now or utcnow()
        appointments = await self.upcoming_appointments(now)
        if not appointments:
            logger.info("Reminder sweep: no upcoming appointments")
            return 0

        outcomes = await asyncio.gather(*[self._remind(a) for a in appointments])
        sent = sum(1 for outcome in outcomes if outcome)
        logger.info(f"Reminder sweep: {sent} reminders sent for {len(appointments)} appointments")
        return sent


# Global instance
reminder_sweep = ReminderSweep()
