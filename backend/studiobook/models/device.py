"""Device model - push tokens registered by the mobile app."""
from sqlalchemy import Column, String, DateTime, Boolean, Index

from ..database import Base
from ..utils.timeutils import utcnow


class Device(Base):
    """Registered device for push notifications."""

    __tablename__ = "devices"
    __table_args__ = (
        Index("idx_devices_user_active", "user_uid", "active"),
    )

    id = Column(String, primary_key=True)  # Client-supplied device identifier
    user_uid = Column(String, nullable=True)  # NULL = anonymous registration
    push_token = Column(String, nullable=True)
    platform = Column(String, nullable=True)  # ios, android
    active = Column(Boolean, default=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
