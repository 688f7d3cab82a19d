# src/app/schemas/shares.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from src.app.domain.models import ShareToken
from src.app.schemas.cookbooks import CookbookResponse
from src.app.schemas.recipes import format_timestamp


class ShareCreate(BaseModel):
    # bounds are enforced by the service so the error shape stays uniform
    maxUsages: Optional[int] = None
    expiresInDays: Optional[int] = None


class ShareIssued(BaseModel):
    shareId: str
    shareToken: str
    url: str


class ShareResponse(BaseModel):
    id: str
    cookbookId: str
    shareToken: str
    url: str
    createdBy: str
    usageCount: int = 0
    maxUsages: Optional[int] = None
    expiresAt: Optional[str] = None
    createdAt: Optional[str] = None
    active: bool = True


class SharePreview(BaseModel):
    cookbook: CookbookResponse
    ownerName: str
    recipeCount: int = 0
    share: ShareResponse


class ShareRedeemRequest(BaseModel):
    newName: str = Field(..., min_length=1, max_length=120)


class ShareRedeemResponse(BaseModel):
    cookbookId: str


def share_response(share: ShareToken, url: str, active: bool) -> ShareResponse:
    return ShareResponse(
        id=share.id,
        cookbookId=share.cookbook_id,
        shareToken=share.token,
        url=url,
        createdBy=share.created_by,
        usageCount=share.usage_count,
        maxUsages=share.max_usages,
        expiresAt=format_timestamp(share.expires_at),
        createdAt=format_timestamp(share.created_at),
        active=active,
    )
