"""Client model - profile of an authenticated end user."""
from sqlalchemy import Column, String, DateTime

from ..database import Base
from ..utils.timeutils import utcnow


class Client(Base):
    """Client profile keyed by identity uid."""

    __tablename__ = "clients"

    id = Column(String, primary_key=True)  # Identity uid
    provider = Column(String, default="")
    provider_user_id = Column(String, default="")
    name = Column(String, default="No name", index=True)
    email = Column(String, default="")
    photo = Column(String, default="")
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
