"""Caller identity from bearer tokens."""
import logging
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .errors import Unauthenticated

logger = logging.getLogger(__name__)

# Anonymous calls are allowed through; routes decide whether they need a uid
security = HTTPBearer(auto_error=False)


def decode_identity_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def get_caller_uid(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Return the authenticated uid, or None for anonymous callers."""
    if credentials is None:
        return None

    try:
        payload = decode_identity_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        logger.info(f"Rejected bearer token: {exc}")
        raise Unauthenticated("Invalid token") from exc

    uid = payload.get("sub")
    if not uid:
        raise Unauthenticated("Invalid token subject")
    return uid


def require_caller_uid(uid: Optional[str] = Depends(get_caller_uid)) -> str:
    """Same as get_caller_uid but anonymous callers are refused."""
    if not uid:
        raise Unauthenticated("You must sign in")
    return uid
