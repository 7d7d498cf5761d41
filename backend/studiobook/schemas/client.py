"""Client profile schemas for API."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ClientUpsert(BaseModel):
    """Profile sent by the app after sign-in. Missing fields reset to defaults."""
    provider: Optional[str] = None
    provider_user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    photo: Optional[str] = None


class ClientResponse(BaseModel):
    id: str
    provider: str = ""
    provider_user_id: str = ""
    name: str
    email: str = ""
    photo: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
