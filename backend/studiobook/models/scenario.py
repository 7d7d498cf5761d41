"""Scenario model - bookable sets and locations."""
from sqlalchemy import Column, String, DateTime, Boolean, Integer, JSON

from ..database import Base
from ..utils.timeutils import utcnow
from ._ids import new_id

MAX_SCENARIO_IMAGES = 5


class Scenario(Base):
    """A bookable photo set."""

    __tablename__ = "scenarios"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    sub_category = Column(String, default="")
    description = Column(String, default="")
    special = Column(Boolean, default=False)
    session_minutes = Column(Integer, nullable=True)  # NULL for special scenarios
    requires_costume = Column(Boolean, default=False)
    main_image = Column(String, default="")  # Blob reference
    images = Column(JSON, default=list)  # Up to MAX_SCENARIO_IMAGES blob references
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
