"""Photo request API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_caller_uid, require_caller_uid
from ..database import get_db
from ..errors import NotFound, PermissionDenied
from ..models import PhotoRequest
from ..models.photo_request import PHOTOS_DELIVERED, PHOTOS_PENDING
from ..schemas.common import CreatedResponse, SuccessResponse
from ..schemas.photo_request import PhotoDelivery, PhotoRequestCreate, PhotoRequestResponse
from ..services.authorization import is_administrator, require_administrator
from ..services.events import PhotoRequestUpdated, event_bus, snapshot
from ..utils.db_utils import retry_on_lock
from ..utils.pagination import paginate
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/photo-requests", tags=["photo-requests"])


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_photo_request(
    request: PhotoRequestCreate,
    caller_uid: str = Depends(require_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Ask for the photos of a session, attaching the payment receipt."""
    now = utcnow()
    photo_request = PhotoRequest(
        client_uid=caller_uid,
        receipt_url=request.receipt_url or "",
        status=PHOTOS_PENDING,
        photo_urls=[],
        requested_at=now,
        updated_at=now,
    )
    db.add(photo_request)
    await retry_on_lock(db.commit)

    logger.info(f"Photo request {photo_request.id} created by {caller_uid}")
    return CreatedResponse(id=photo_request.id)


@router.put("/{request_id}/delivery", response_model=SuccessResponse)
async def deliver_photos(
    request_id: str,
    delivery: PhotoDelivery,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Attach the photos and mark the request delivered (administrators only)."""
    await require_administrator(db, caller_uid, "Administrators only.")

    photo_request = await db.get(PhotoRequest, request_id)
    if not photo_request:
        raise NotFound("Photo request not found")

    before = snapshot(photo_request)
    photo_request.photo_urls = list(delivery.photo_urls)
    photo_request.status = PHOTOS_DELIVERED
    photo_request.updated_at = utcnow()
    after = snapshot(photo_request)

    await retry_on_lock(db.commit)

    event_bus.publish(PhotoRequestUpdated(before=before, after=after))
    return SuccessResponse()


@router.delete("/{request_id}", response_model=SuccessResponse)
async def delete_photo_request(
    request_id: str,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Delete a request. Owners may delete their own, administrators any."""
    photo_request = await db.get(PhotoRequest, request_id)
    if not photo_request:
        return SuccessResponse()

    if photo_request.client_uid != caller_uid and not await is_administrator(db, caller_uid):
        raise PermissionDenied("Not authorized.")

    await db.delete(photo_request)
    await retry_on_lock(db.commit)
    return SuccessResponse()


@router.get("", response_model=List[PhotoRequestResponse])
async def list_photo_requests(
    client_uid: Optional[str] = Query(None, description="Admin only: requests of this client"),
    limit: Optional[int] = Query(None, ge=1),
    last_id: Optional[str] = None,
    caller_uid: str = Depends(require_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's requests, or any client's for administrators."""
    query = select(PhotoRequest)
    if await is_administrator(db, caller_uid):
        if client_uid:
            query = query.where(PhotoRequest.client_uid == client_uid)
    else:
        query = query.where(PhotoRequest.client_uid == caller_uid)

    return await paginate(
        db, query, PhotoRequest, PhotoRequest.requested_at, descending=True, limit=limit, last_id=last_id
    )
