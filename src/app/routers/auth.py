from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.app.deps import CurrentUser, get_current_user
from src.app.domain.models import Profile, display_name

router = APIRouter(prefix="/auth", tags=["auth"])


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    displayName: str


@router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser = Depends(get_current_user)) -> MeResponse:
    profile = Profile(id=user.id, name=user.name, email=user.email)
    return MeResponse(id=user.id, email=user.email, name=user.name, displayName=display_name(profile))
