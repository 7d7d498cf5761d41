"""In-process event bus for post-commit reactions.

Services publish an event once their write has committed. Each subscribed
handler runs as its own task, so the publishing request never waits on it
and a failing handler only affects itself.
"""
import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Set, Type

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class AppointmentUpdated:
    """Snapshots of an appointment around a committed update."""
    before: dict
    after: dict


@dataclass(frozen=True)
class PhotoRequestUpdated:
    before: dict
    after: dict


@dataclass(frozen=True)
class ScenarioCreated:
    scenario: dict


class EventBus:
    """Routes events to subscribed async handlers by event type."""

    def __init__(self):
        self._handlers: Dict[Type, List[Handler]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, event_type: Type, handler: Handler):
        self._handlers[event_type].append(handler)

    def clear(self):
        self._handlers.clear()

    async def _run(self, handler: Handler, event: Any):
        try:
            await handler(event)
        except Exception as e:
            logger.error(f"Handler {handler.__name__} failed for {type(event).__name__}: {e}")

    def publish(self, event: Any):
        """Schedule every handler for `event` and return immediately."""
        for handler in self._handlers.get(type(event), []):
            task = asyncio.create_task(self._run(handler, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def drain(self):
        """Wait for all scheduled handlers to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    @property
    def pending_count(self) -> int:
        return len(self._pending)


def snapshot(instance) -> dict:
    """Column values of a model instance as a plain dict."""
    return {column.key: getattr(instance, column.key) for column in instance.__table__.columns}


# Global instance
event_bus = EventBus()
