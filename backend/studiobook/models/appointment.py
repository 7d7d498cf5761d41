"""Appointment model - a client's booking request against a scenario."""
from sqlalchemy import Column, String, DateTime, Index

from ..database import Base
from ..utils.timeutils import utcnow
from ._ids import new_id

STATUS_WAITING = "waiting"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"

ATTENDANCE_WAITING = "waiting"


class Appointment(Base):
    """Booking request. Scenario name and image are denormalised copies."""

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_client_date", "client_uid", "date"),
        Index("idx_appointments_client_status_created", "client_uid", "request_status", "created_at"),
        Index("idx_appointments_status_date", "request_status", "date"),
    )

    id = Column(String, primary_key=True, default=new_id)
    client_uid = Column(String, nullable=False)
    scenario_id = Column(String, nullable=True)
    scenario_name = Column(String, nullable=True)
    scenario_image = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    date = Column(DateTime, nullable=False)  # UTC instant
    request_status = Column(String, nullable=False, default=STATUS_WAITING)
    attendance_status = Column(String, nullable=False, default=ATTENDANCE_WAITING)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)
