"""Device registration API endpoints for push notifications."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_caller_uid
from ..database import get_db
from ..models import Device
from ..schemas.common import SuccessResponse
from ..schemas.device import DeviceRegisterRequest
from ..utils.db_utils import retry_on_lock
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/devices", tags=["devices"])


@router.post("/register", response_model=SuccessResponse)
async def register_device(
    request: DeviceRegisterRequest,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Register a device for push notifications.

    Keyed by the app's device id: an existing record is updated in place.
    Anonymous registrations are stored without an owner; the app calls this
    again after sign-in to attach the device to the user.
    """
    device = await db.get(Device, request.device_id)
    created = device is None
    if created:
        device = Device(id=request.device_id)
        db.add(device)

    device.user_uid = caller_uid
    device.push_token = request.push_token
    device.platform = request.platform
    device.active = True
    device.updated_at = utcnow()

    await retry_on_lock(db.commit)

    token_hint = (request.push_token or "")[:16]
    if created:
        logger.info(f"New device registered: {request.device_id} ({token_hint}...)")
    else:
        logger.info(f"Device token updated: {request.device_id} ({token_hint}...)")
    return SuccessResponse()
