"""Appointment schemas for API."""
from datetime import date as date_type, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AppointmentCreate(BaseModel):
    """Booking request sent by a client.

    Owner and status fields are assigned by the server; if a client sends
    them they are dropped.
    """
    model_config = ConfigDict(extra="ignore")

    date: datetime
    scenario_id: Optional[str] = None
    scenario_name: Optional[str] = None
    scenario_image: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentUpdate(BaseModel):
    """Partial update applied by an administrator."""
    model_config = ConfigDict(extra="forbid")

    scenario_id: Optional[str] = None
    scenario_name: Optional[str] = None
    scenario_image: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None
    request_status: Optional[str] = None
    attendance_status: Optional[str] = None


class AppointmentQuery(BaseModel):
    """Listing filters. `date` and `client_uid` only apply to administrators."""
    date: Optional[date_type] = None
    client_uid: Optional[str] = None
    limit: Optional[int] = None
    last_id: Optional[str] = None


class AppointmentResponse(BaseModel):
    """Schema for appointment in API responses."""
    id: str
    client_uid: str
    scenario_id: Optional[str] = None
    scenario_name: Optional[str] = None
    scenario_image: Optional[str] = None
    notes: Optional[str] = None
    date: datetime
    request_status: str
    attendance_status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
