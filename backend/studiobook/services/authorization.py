"""Administrator membership check.

The check fails closed: if the membership lookup itself errors, the caller is
treated as a regular user. Only the lookup is guarded, so unrelated bugs in a
handler still surface as errors instead of permission denials.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import PermissionDenied
from ..models import Administrator

logger = logging.getLogger(__name__)


async def _lookup_admin(session: AsyncSession, uid: str) -> bool:
    """Membership lookup mapping any storage failure to "not admin"."""
    try:
        result = await session.execute(
            select(Administrator.id).where(Administrator.uid == uid).limit(1)
        )
        return result.first() is not None
    except SQLAlchemyError as e:
        logger.warning(f"Admin lookup failed for {uid}, denying: {e}")
        return False


async def is_administrator(session: AsyncSession, uid: Optional[str]) -> bool:
    """True iff `uid` has an administrator membership record."""
    if not uid:
        return False
    return await _lookup_admin(session, uid)


async def require_administrator(session: AsyncSession, uid: Optional[str], message: str = "Administrators only."):
    """Raise PermissionDenied unless `uid` is an administrator."""
    if not await is_administrator(session, uid):
        raise PermissionDenied(message)
