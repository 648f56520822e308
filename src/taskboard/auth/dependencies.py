"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current identity from the request. The only accepted
credential is ``Authorization: Bearer <token>``.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.identity import CurrentIdentity
from taskboard.db.engine import get_db
from taskboard.errors import Unauthenticated
from taskboard.services.auth_service import AuthService


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Optional[CurrentIdentity]:
    """Extract current identity (optional — returns None if no auth header).

    A header that is present but carries an unknown, revoked or expired
    token is still an error: it raises Unauthenticated.
    """
    token = _bearer(authorization)
    if token is None:
        return None
    return await AuthService(db).resolve_token(token)


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no auth)."""
    if identity is None:
        raise Unauthenticated()
    return identity
