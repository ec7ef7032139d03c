# jumboboxd/security.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from jumboboxd.core.errors import NotFoundError, Unauthorized
from jumboboxd.core.settings import settings
from jumboboxd.db.crud.users import get_user_by_external_id
from jumboboxd.db.models import User
from jumboboxd.db.session import get_async_session
from jumboboxd.integrations.identity import IdentityGateway, get_identity_gateway

# auto_error=False so we can return a clean 401 instead of the framework 403
bearer_scheme = HTTPBearer(auto_error=False)


def _token_from_request(
    request: Request, creds: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if creds and creds.scheme and creds.scheme.lower() == "bearer" and creds.credentials:
        return creds.credentials
    # Browser sessions from the identity provider carry the token in a cookie
    cookie = request.cookies.get(settings.identity_session_cookie)
    return cookie or None


def get_current_external_id(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IdentityGateway = Depends(get_identity_gateway),
) -> str:
    """Verified subject of the caller's token. Never taken from query or body."""
    token = _token_from_request(request, creds)
    if not token:
        raise Unauthorized("Missing bearer token")
    return identity.verify_token(token)


async def require_user(
    external_id: str = Depends(get_current_external_id),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Auth dependency for user-scoped routes.
    The identity must have been synced (POST /api/users) first.
    """
    user = await get_user_by_external_id(db, external_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
