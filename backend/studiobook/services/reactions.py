"""Change-triggered notifications.

Decision functions are pure: they look at before/after snapshots and return
the notice to send, or None. Handlers hand the notice to the dispatcher.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..models.appointment import STATUS_ACCEPTED, STATUS_REJECTED
from ..models.photo_request import PHOTOS_DELIVERED
from .events import AppointmentUpdated, EventBus, PhotoRequestUpdated, ScenarioCreated
from .notifier import NotificationDispatcher, notification_dispatcher

logger = logging.getLogger(__name__)

CATEGORY_CONFIRMATION = "confirmation"
CATEGORY_INFO = "info"

PHOTOS_READY_TITLE = "Photos Ready"
PHOTOS_READY_BODY = "Your photos are now available in the app."
NEW_SCENARIO_TITLE = "New Scenario!"


@dataclass
class Notice:
    """Content of a notification for one recipient."""
    recipient: str
    title: str
    category: str
    body: str
    image: Optional[str] = None


def appointment_status_notice(before: dict, after: dict) -> Optional[Notice]:
    """Notice for an accepted or rejected appointment, else None."""
    new_status = after.get("request_status")
    if new_status == before.get("request_status"):
        return None

    title = after.get("scenario_name") or "Appointment"
    if new_status == STATUS_ACCEPTED:
        body = f"Your appointment for {title} has been confirmed."
    elif new_status == STATUS_REJECTED:
        body = f"Your appointment for {title} has been rejected."
    else:
        return None

    return Notice(
        recipient=after["client_uid"],
        title=title,
        category=CATEGORY_CONFIRMATION,
        body=body,
        image=after.get("scenario_image") or None,
    )


def photos_delivered_notice(before: dict, after: dict) -> Optional[Notice]:
    """Notice when a photo request first becomes delivered."""
    if after.get("status") != PHOTOS_DELIVERED or before.get("status") == PHOTOS_DELIVERED:
        return None
    return Notice(
        recipient=after["client_uid"],
        title=PHOTOS_READY_TITLE,
        category=CATEGORY_INFO,
        body=PHOTOS_READY_BODY,
    )


def new_scenario_message(scenario: dict) -> tuple:
    """(title, body, image) announcing a new scenario."""
    return (
        NEW_SCENARIO_TITLE,
        f'Come and discover "{scenario.get("name")}"',
        scenario.get("main_image") or None,
    )


def register_reactions(bus: EventBus, dispatcher: NotificationDispatcher = notification_dispatcher):
    """Subscribe the notification handlers on `bus`."""

    async def on_appointment_updated(event: AppointmentUpdated):
        notice = appointment_status_notice(event.before, event.after)
        if notice is None:
            return
        logger.info(f"Appointment {event.after.get('id')} is now {event.after.get('request_status')}")
        await dispatcher.dispatch(notice.recipient, notice.title, notice.category, notice.body, notice.image)

    async def on_photo_request_updated(event: PhotoRequestUpdated):
        notice = photos_delivered_notice(event.before, event.after)
        if notice is None:
            return
        await dispatcher.dispatch(notice.recipient, notice.title, notice.category, notice.body, notice.image)

    async def on_scenario_created(event: ScenarioCreated):
        title, body, image = new_scenario_message(event.scenario)
        await dispatcher.broadcast(title, body, image)

    bus.subscribe(AppointmentUpdated, on_appointment_updated)
    bus.subscribe(PhotoRequestUpdated, on_photo_request_updated)
    bus.subscribe(ScenarioCreated, on_scenario_created)
