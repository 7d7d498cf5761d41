"""PhotoRequest model - client request for the photos of a paid session."""
from sqlalchemy import Column, String, DateTime, JSON

from ..database import Base
from ..utils.timeutils import utcnow
from ._ids import new_id

PHOTOS_PENDING = "pending"
PHOTOS_DELIVERED = "delivered"


class PhotoRequest(Base):
    """Photo delivery request."""

    __tablename__ = "photo_requests"

    id = Column(String, primary_key=True, default=new_id)
    client_uid = Column(String, nullable=False, index=True)
    receipt_url = Column(String, default="")
    status = Column(String, nullable=False, default=PHOTOS_PENDING)
    photo_urls = Column(JSON, default=list)
    requested_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)
