"""Current-owner endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from planner.api.deps import AUTH_DEP
from planner.core.auth import AuthContext
from planner.schemas.users import UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
async def get_me(auth: AuthContext = AUTH_DEP) -> UserRead:
    return UserRead.model_validate(auth.user, from_attributes=True)
