"""Notification inbox API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import require_caller_uid
from ..database import get_db
from ..models import Notification
from ..schemas.notification import NotificationResponse
from ..utils.pagination import paginate

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_my_notifications(
    limit: Optional[int] = Query(None, ge=1),
    last_id: Optional[str] = None,
    caller_uid: str = Depends(require_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Notifications addressed to the caller, newest first."""
    query = select(Notification).where(Notification.recipient_uid == caller_uid)
    return await paginate(
        db, query, Notification, Notification.created_at, descending=True, limit=limit, last_id=last_id
    )
