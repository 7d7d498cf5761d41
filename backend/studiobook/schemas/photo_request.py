"""Photo request schemas for API."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PhotoRequestCreate(BaseModel):
    receipt_url: Optional[str] = None


class PhotoDelivery(BaseModel):
    """Photos handed over by an administrator."""
    photo_urls: List[str] = Field(default_factory=list)


class PhotoRequestResponse(BaseModel):
    id: str
    client_uid: str
    receipt_url: str = ""
    status: str
    photo_urls: List[str] = []
    requested_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
