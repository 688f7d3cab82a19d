# src/app/domain/models.py
"""
Domain models for cookbooks, recipes and share links.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

UNKNOWN_OWNER_NAME = "Unknown"


@dataclass(frozen=True)
class Ingredient:
    """A single ingredient line, kept in the order the author wrote it."""
    item: str
    amount: Optional[str] = None


@dataclass(frozen=True)
class CopiedFrom:
    """Attribution recorded on a cookbook created by duplication."""
    source_cookbook_id: str
    owner_name: str


@dataclass
class Cookbook:
    """A named recipe collection owned by exactly one user."""
    id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    is_public: bool = False
    copied_from: Optional[CopiedFrom] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Recipe:
    """
    A recipe belonging to one cookbook.

    owner_id is a copy of the cookbook's owner taken at creation time and is
    only trusted for strict-ownership checks.
    """
    id: str
    cookbook_id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    ingredients: list[Ingredient] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    image_url: Optional[str] = None
    original_url: Optional[str] = None
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    servings: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class RecipeContent:
    """
    The user-editable part of a recipe.

    Used as input for creation, as the output of AI extraction and as the
    unit copied verbatim by cookbook duplication.
    """
    title: str
    description: Optional[str] = None
    ingredients: tuple[Ingredient, ...] = ()
    instructions: tuple[str, ...] = ()
    image_url: Optional[str] = None
    original_url: Optional[str] = None
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    servings: Optional[str] = None

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> RecipeContent:
        return cls(
            title=recipe.title,
            description=recipe.description,
            ingredients=tuple(recipe.ingredients),
            instructions=tuple(recipe.instructions),
            image_url=recipe.image_url,
            original_url=recipe.original_url,
            prep_time=recipe.prep_time,
            cook_time=recipe.cook_time,
            servings=recipe.servings,
        )

    def build(self, recipe_id: str, cookbook_id: str, owner_id: str, now: datetime) -> Recipe:
        return Recipe(
            id=recipe_id,
            cookbook_id=cookbook_id,
            owner_id=owner_id,
            title=self.title,
            description=self.description,
            ingredients=list(self.ingredients),
            instructions=list(self.instructions),
            image_url=self.image_url,
            original_url=self.original_url,
            prep_time=self.prep_time,
            cook_time=self.cook_time,
            servings=self.servings,
            created_at=now,
            updated_at=now,
        )


@dataclass
class ShareToken:
    """An invite link for copying a cookbook."""
    id: str
    cookbook_id: str
    token: str
    created_by: str
    usage_count: int = 0
    max_usages: Optional[int] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_alive(self, now: datetime) -> bool:
        """
        Dead/alive predicate shared by every read of a token.

        A token is dead once now reaches expires_at or once usage_count
        reaches max_usages. Dead tokens are kept, never deleted.
        """
        if self.expires_at is not None and now >= self.expires_at:
            return False
        if self.max_usages is not None and self.usage_count >= self.max_usages:
            return False
        return True


@dataclass(frozen=True)
class IssuedToken:
    """Result of issuing a share link."""
    token_id: str
    token: str


@dataclass
class Profile:
    """Public identity of a user, used for attribution."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


def display_name(profile: Optional[Profile]) -> str:
    """Name, then email handle, then "Unknown" when the profile is missing."""
    if profile is None:
        return UNKNOWN_OWNER_NAME
    return profile.name or profile.email or UNKNOWN_OWNER_NAME


@dataclass
class SharedCookbook:
    """What a share-link recipient sees before redeeming."""
    cookbook: Cookbook
    owner_name: str
    share: ShareToken
    recipe_count: int = 0
