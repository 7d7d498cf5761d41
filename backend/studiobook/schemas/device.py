"""Device registration schemas for API."""
from typing import Optional

from pydantic import BaseModel, Field


class DeviceRegisterRequest(BaseModel):
    """Request to register a device for push notifications."""
    device_id: str = Field(..., min_length=1)
    push_token: Optional[str] = None
    platform: Optional[str] = None
