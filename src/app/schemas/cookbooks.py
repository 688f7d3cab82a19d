# src/app/schemas/cookbooks.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from src.app.domain.models import Cookbook
from src.app.schemas.recipes import format_timestamp


class CopiedFromResponse(BaseModel):
    sourceCookbookId: str
    ownerName: str


class CookbookResponse(BaseModel):
    id: str
    ownerId: str
    name: str
    description: Optional[str] = None
    isPublic: bool = False
    copiedFrom: Optional[CopiedFromResponse] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class CookbookCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)


class CookbookUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=500)
    isPublic: Optional[bool] = None


class CookbookCopyRequest(BaseModel):
    newName: str = Field(..., min_length=1, max_length=120)


class CookbookCopyResponse(BaseModel):
    cookbookId: str


def cookbook_response(cookbook: Cookbook) -> CookbookResponse:
    copied_from = None
    if cookbook.copied_from:
        copied_from = CopiedFromResponse(
            sourceCookbookId=cookbook.copied_from.source_cookbook_id,
            ownerName=cookbook.copied_from.owner_name,
        )
    return CookbookResponse(
        id=cookbook.id,
        ownerId=cookbook.owner_id,
        name=cookbook.name,
        description=cookbook.description,
        isPublic=cookbook.is_public,
        copiedFrom=copied_from,
        createdAt=format_timestamp(cookbook.created_at),
        updatedAt=format_timestamp(cookbook.updated_at),
    )
