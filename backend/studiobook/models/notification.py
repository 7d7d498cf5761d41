"""Notification model - append-only log of notifications sent to users."""
from sqlalchemy import Column, String, DateTime

from ..database import Base
from ..utils.timeutils import utcnow
from ._ids import new_id


class Notification(Base):
    """Record of a notification event, written regardless of push outcome."""

    __tablename__ = "notifications"

    id = Column(String, primary_key=True, default=new_id)
    recipient_uid = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    category = Column(String, nullable=False)  # confirmation, reminder, info
    body = Column(String, nullable=False)
    image = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
