"""Local bearer-token authentication resolving the single planner owner."""

from __future__ import annotations

from dataclasses import dataclass
from hmac import compare_digest
from typing import TYPE_CHECKING, Literal

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from planner.core.config import settings
from planner.core.logging import get_logger
from planner.core.time import utcnow
from planner.db.session import get_session
from planner.models.users import User

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)
SECURITY_DEP = Depends(security)
SESSION_DEP = Depends(get_session)
LOCAL_AUTH_USER_ID = "local-auth-user"
LOCAL_AUTH_EMAIL = "owner@batcave.local"
LOCAL_AUTH_NAME = "Planner Owner"


@dataclass
class AuthContext:
    """Authenticated user context resolved from inbound auth headers."""

    actor_type: Literal["user"]
    user: User


async def _get_or_create_local_user(session: AsyncSession) -> User:
    user = await User.objects.filter_by(external_id=LOCAL_AUTH_USER_ID).first(session)
    if user is None:
        user = User(
            external_id=LOCAL_AUTH_USER_ID,
            email=LOCAL_AUTH_EMAIL,
            name=LOCAL_AUTH_NAME,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        logger.info("auth.local_user.created", extra={"user_id": str(user.id)})
        return user

    if user.email != LOCAL_AUTH_EMAIL or user.name != LOCAL_AUTH_NAME:
        user.email = LOCAL_AUTH_EMAIL
        user.name = LOCAL_AUTH_NAME
        user.updated_at = utcnow()
        session.add(user)
        await session.commit()
        await session.refresh(user)
    return user


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials | None = SECURITY_DEP,
    session: AsyncSession = SESSION_DEP,
) -> AuthContext:
    """Require a valid local bearer token and return the owner context."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    token = credentials.credentials.strip()
    expected = settings.local_auth_token.strip()
    if not token or not expected or not compare_digest(token, expected):
        logger.info("auth.local_token.rejected")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    user = await _get_or_create_local_user(session)
    return AuthContext(actor_type="user", user=user)
