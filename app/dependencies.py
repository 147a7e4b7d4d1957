"""
Authorization guard: FastAPI dependencies that resolve the request's
actor from a ``Authorization: Bearer <token>`` header.

Only two checks exist here: "is authenticated" and "is admin".
Ownership is decided per operation in the services (``app.permissions``).
"""
import logging

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import AuthenticationRequired, Forbidden
from app.models import User
from app.permissions import is_admin
from app.repositories import user_repository
from app.security import TokenError, decode_access_token

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise AuthenticationRequired("Missing Authorization header")

    scheme, _, token = raw.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationRequired("Authorization must be: Bearer <token>")
    return token.strip()


async def _resolve_user(db: AsyncSession, token: str) -> User:
    try:
        user_id = decode_access_token(token)
    except TokenError as exc:
        raise AuthenticationRequired("Could not validate credentials") from exc

    user = await user_repository.get_by_id(db, user_id)
    if user is None:
        raise AuthenticationRequired("Could not validate credentials")
    return user


async def get_current_user(
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Authenticated actor, or 401."""
    return await _resolve_user(db, _extract_bearer_token(authorization))


async def get_optional_user(
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """
    Authenticated actor, or None for anonymous callers.

    A present but unusable credential is treated as anonymous rather
    than rejected, so public endpoints never answer 401.
    """
    if not authorization:
        return None
    try:
        return await _resolve_user(db, _extract_bearer_token(authorization))
    except AuthenticationRequired as exc:
        logger.debug("Ignoring unusable credential on public endpoint: %s", exc.message)
        return None


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Authenticated actor with the admin role, or 403."""
    if not is_admin(user):
        raise Forbidden("Admin access required")
    return user
