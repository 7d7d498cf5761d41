"""Client profile API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import get_caller_uid, require_caller_uid
from ..database import get_db
from ..errors import PermissionDenied
from ..models import Client
from ..schemas.client import ClientUpsert, ClientResponse
from ..schemas.common import SuccessResponse
from ..services.authorization import is_administrator, require_administrator
from ..utils.db_utils import retry_on_lock
from ..utils.pagination import paginate
from ..utils.timeutils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])

DEFAULT_CLIENT_NAME = "No name"


@router.put("/me", response_model=SuccessResponse)
async def upsert_my_profile(
    profile: ClientUpsert,
    caller_uid: str = Depends(require_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Create or refresh the caller's profile.

    The app calls this after every sign-in.
    """
    now = utcnow()
    client = await db.get(Client, caller_uid)
    if client is None:
        client = Client(id=caller_uid, created_at=now)
        db.add(client)

    client.provider = profile.provider or ""
    client.provider_user_id = profile.provider_user_id or ""
    client.name = profile.name or DEFAULT_CLIENT_NAME
    client.email = profile.email or ""
    client.photo = profile.photo or ""
    client.updated_at = now

    await retry_on_lock(db.commit)
    return SuccessResponse()


@router.delete("/{client_uid}", response_model=SuccessResponse)
async def delete_client(
    client_uid: str,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """Delete a profile. Clients may delete their own, administrators any."""
    if client_uid != caller_uid and not await is_administrator(db, caller_uid):
        raise PermissionDenied("Not authorized to delete this profile.")

    client = await db.get(Client, client_uid)
    if client is not None:
        await db.delete(client)
        await retry_on_lock(db.commit)
        logger.info(f"Client profile deleted: {client_uid}")

    return SuccessResponse()


@router.get("", response_model=List[ClientResponse])
async def list_clients(
    search: Optional[str] = Query(None, description="Name prefix"),
    limit: Optional[int] = Query(None, ge=1),
    last_id: Optional[str] = None,
    caller_uid: Optional[str] = Depends(get_caller_uid),
    db: AsyncSession = Depends(get_db),
):
    """List client profiles (administrators only)."""
    await require_administrator(db, caller_uid, "Access denied.")

    query = select(Client)
    if search:
        query = query.where(Client.name.startswith(search, autoescape=True))
        return await paginate(db, query, Client, Client.name, limit=limit, last_id=last_id)

    return await paginate(
        db, query, Client, Client.created_at, descending=True, limit=limit, last_id=last_id
    )
