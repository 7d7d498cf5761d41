"""Services for admission, notifications, and scheduling."""
from .events import EventBus
from .notifier import NotificationDispatcher
from .reminders import ReminderSweep
from .scheduler import SchedulerService

__all__ = ["EventBus", "NotificationDispatcher", "ReminderSweep", "SchedulerService"]
