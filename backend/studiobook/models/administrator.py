"""Administrator model - identities with admin privilege."""
from sqlalchemy import Column, String

from ..database import Base
from ._ids import new_id


class Administrator(Base):
    """Admin membership record. Managed outside the API."""

    __tablename__ = "administrators"

    id = Column(String, primary_key=True, default=new_id)
    uid = Column(String, nullable=False, index=True)
