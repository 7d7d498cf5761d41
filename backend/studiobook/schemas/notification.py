"""Notification schemas for API."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: str
    recipient_uid: str
    title: str
    category: str
    body: str
    image: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
