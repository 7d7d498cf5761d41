"""Appointment admission and moderation.

Creation passes two gates, in order, before anything is written:

1. Rejection limit - a client with `max_recent_rejections` rejected
   appointments created inside the trailing window is blocked.
2. One per day - a client may hold a single appointment per local
   calendar day, whatever its status.

Both gates are read-then-write checks. Two simultaneous requests from the
same client can both pass them; there is no locking or unique constraint.

Moderation is asymmetric: administrators may update any field, the owning
client may only reject their own appointment, as a single-field update,
and only while it is not rejected yet.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import AlreadyExists, FailedPrecondition, InvalidArgument, NotFound, PermissionDenied, Unauthenticated
from ..models import Appointment
from ..models.appointment import ATTENDANCE_WAITING, STATUS_REJECTED, STATUS_WAITING
from ..schemas.appointment import AppointmentCreate, AppointmentQuery, AppointmentUpdate
from ..utils.db_utils import retry_on_lock
from ..utils.pagination import paginate
from ..utils.timeutils import day_window, to_utc_naive, utcnow
from .authorization import is_administrator
from .events import AppointmentUpdated, EventBus, event_bus, snapshot

logger = logging.getLogger(__name__)

CLIENT_ALLOWED_UPDATE = {"request_status": STATUS_REJECTED}

# Columns an administrator may change but never clear
NON_NULLABLE_FIELDS = ("date", "request_status", "attendance_status")


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg')}" if location else error.get("msg", "Invalid request")


async def count_recent_rejections(session: AsyncSession, client_uid: str, now: datetime) -> int:
    """Rejected appointments created strictly after `now - window`."""
    since = now - timedelta(days=settings.rejection_window_days)
    result = await session.execute(
        select(func.count(Appointment.id)).where(
            Appointment.client_uid == client_uid,
            Appointment.request_status == STATUS_REJECTED,
            Appointment.created_at > since,
        )
    )
    return result.scalar() or 0


async def has_appointment_on_day(session: AsyncSession, client_uid: str, when: datetime) -> bool:
    """Whether the client already has an appointment on the local day of `when`."""
    start, end = day_window(when)
    result = await session.execute(
        select(Appointment.id).where(
            Appointment.client_uid == client_uid,
            Appointment.date >= start,
            Appointment.date <= end,
        ).limit(1)
    )
    return result.first() is not None


async def create_appointment(
    session: AsyncSession,
    caller_uid: Optional[str],
    payload: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Appointment:
    """Admit and store a booking request for the caller."""
    if not caller_uid:
        raise Unauthenticated("You must sign in")

    try:
        request = AppointmentCreate.model_validate(payload or {})
    except ValidationError as exc:
        raise InvalidArgument(_first_error(exc)) from exc

    now = now or utcnow()
    appointment_date = to_utc_naive(request.date)

    rejections = await count_recent_rejections(session, caller_uid, now)
    if rejections >= settings.max_recent_rejections:
        logger.info(f"Booking blocked for {caller_uid}: {rejections} recent rejections")
        raise FailedPrecondition("Appointments blocked due to frequent cancellations in the last month.")

    if await has_appointment_on_day(session, caller_uid, appointment_date):
        raise AlreadyExists("You already have an appointment scheduled for this day.")

    appointment = Appointment(
        **request.model_dump(exclude={"date"}),
        client_uid=caller_uid,
        date=appointment_date,
        request_status=STATUS_WAITING,
        attendance_status=ATTENDANCE_WAITING,
        created_at=now,
        updated_at=now,
    )
    session.add(appointment)
    await retry_on_lock(session.commit)
    await session.refresh(appointment)

    logger.info(f"Appointment {appointment.id} requested by {caller_uid} for {appointment_date}")
    return appointment


def _client_update_allowed(fields: Dict[str, Any]) -> bool:
    return fields == CLIENT_ALLOWED_UPDATE


def _admin_changes(fields: Dict[str, Any]) -> Dict[str, Any]:
    try:
        update = AppointmentUpdate.model_validate(fields)
    except ValidationError as exc:
        raise InvalidArgument(_first_error(exc)) from exc

    changes = update.model_dump(exclude_unset=True)
    if not changes:
        raise InvalidArgument("No fields to update.")
    cleared = sorted(key for key in NON_NULLABLE_FIELDS if key in changes and changes[key] is None)
    if cleared:
        raise InvalidArgument(f"{', '.join(cleared)} cannot be null.")
    if "date" in changes:
        changes["date"] = to_utc_naive(changes["date"])
    return changes


async def update_appointment(
    session: AsyncSession,
    caller_uid: Optional[str],
    appointment_id: str,
    fields: Dict[str, Any],
    bus: EventBus = event_bus,
) -> Appointment:
    """Apply a moderation update and publish the before/after pair."""
    if not caller_uid:
        raise Unauthenticated("Not signed in")

    fields = dict(fields or {})
    admin = await is_administrator(session, caller_uid)

    appointment = await session.get(Appointment, appointment_id)
    if appointment is None:
        raise NotFound("Appointment not found")

    if admin:
        changes = _admin_changes(fields)
    else:
        if appointment.client_uid != caller_uid:
            raise PermissionDenied("You do not have permission over this appointment.")
        if not _client_update_allowed(fields):
            raise PermissionDenied("Clients can only cancel their appointment.")
        if appointment.request_status == STATUS_REJECTED:
            raise PermissionDenied("This appointment was already rejected.")
        changes = dict(CLIENT_ALLOWED_UPDATE)

    before = snapshot(appointment)
    for key, value in changes.items():
        setattr(appointment, key, value)
    appointment.updated_at = utcnow()
    after = snapshot(appointment)

    await retry_on_lock(session.commit)

    logger.info(
        f"Appointment {appointment_id} updated by {'admin' if admin else 'client'} {caller_uid}: "
        f"{sorted(changes)}"
    )
    bus.publish(AppointmentUpdated(before=before, after=after))
    return appointment


async def list_appointments(
    session: AsyncSession,
    caller_uid: Optional[str],
    query: AppointmentQuery,
) -> List[Appointment]:
    """Appointments visible to the caller, ordered by date.

    Administrators see everything, narrowed to one local day or one client.
    Clients see their own appointments that were not rejected.
    """
    if not caller_uid:
        raise Unauthenticated("Not signed in")

    statement = select(Appointment)
    if await is_administrator(session, caller_uid):
        if query.date:
            start, end = day_window(to_utc_naive(datetime.combine(query.date, datetime.min.time())))
            statement = statement.where(Appointment.date >= start, Appointment.date <= end)
        elif query.client_uid:
            statement = statement.where(Appointment.client_uid == query.client_uid)
    else:
        statement = statement.where(
            Appointment.client_uid == caller_uid,
            Appointment.request_status != STATUS_REJECTED,
        )

    return await paginate(
        session,
        statement,
        Appointment,
        Appointment.date,
        limit=query.limit,
        last_id=query.last_id,
    )
