"""Appointment API endpoints."""
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_caller_uid
from ..database import get_db
from ..schemas.appointment import AppointmentQuery, AppointmentResponse
from ..schemas.common import CreatedResponse, SuccessResponse
from ..services import appointments as appointment_service

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_appointment(
    payload: Dict[str, Any] = Body(...),
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Request an appointment for the signed-in client."""
    appointment = await appointment_service.create_appointment(db, caller_uid, payload)
    return CreatedResponse(id=appointment.id)


@router.patch("/{appointment_id}", response_model=SuccessResponse)
async def update_appointment(
    appointment_id: str,
    fields: Dict[str, Any] = Body(...),
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Moderate an appointment (admin) or cancel it (owning client)."""
    await appointment_service.update_appointment(db, caller_uid, appointment_id, fields)
    return SuccessResponse()


@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    date: Optional[date] = Query(None, description="Admin only: appointments on this local day"),
    client_uid: Optional[str] = Query(None, description="Admin only: appointments of this client"),
    limit: Optional[int] = Query(None, ge=1),
    last_id: Optional[str] = None,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """List appointments visible to the caller, ordered by date."""
    query = AppointmentQuery(date=date, client_uid=client_uid, limit=limit, last_id=last_id)
    return await appointment_service.list_appointments(db, caller_uid, query)
