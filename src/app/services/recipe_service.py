# src/app/services/recipe_service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

from src.app.domain.access import (
    can_read,
    require_caller,
    require_cookbook_owner,
    require_recipe_owner,
)
from src.app.domain.errors import NotFoundError, ValidationFailureError
from src.app.domain.models import Ingredient, Recipe, RecipeContent
from src.app.domain.validation import require_text, validate_recipe_content
from src.app.infra.db.base import CookbookRepository, RecipeRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "ingredients",
        "instructions",
        "image_url",
        "prep_time",
        "cook_time",
        "servings",
    }
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _clean_changes(changes: dict[str, Any]) -> dict[str, Any]:
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationFailureError(", ".join(sorted(unknown)), "cannot be updated")

    cleaned: dict[str, Any] = {}
    for key, value in changes.items():
        if key == "title":
            cleaned[key] = require_text("title", value)
        elif key == "ingredients":
            items = [
                ing if isinstance(ing, Ingredient) else Ingredient(**ing)
                for ing in (value or [])
            ]
            for position, ing in enumerate(items):
                require_text(f"ingredients[{position}].item", ing.item)
            cleaned[key] = items
        elif key == "instructions":
            cleaned[key] = [str(step) for step in (value or [])]
        else:
            cleaned[key] = value
    return cleaned


class RecipeService:
    """
    Recipe management.

    Writes check the recipe's own owner_id; reads check visibility of the
    parent cookbook, which may be public.
    """

    def __init__(
        self,
        cookbooks: CookbookRepository,
        recipes: RecipeRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._cookbooks = cookbooks
        self._recipes = recipes
        self._clock = clock or _now_utc

    def require_writable_cookbook(self, cookbook_id: str, caller_id: Optional[str]) -> str:
        """Ownership check done before any expensive work on a cookbook."""
        caller = require_caller(caller_id)
        require_cookbook_owner(self._cookbooks.get(cookbook_id), caller)
        return caller

    def create(self, caller_id: Optional[str], cookbook_id: str, content: RecipeContent) -> Recipe:
        caller = require_caller(caller_id)
        cookbook = require_cookbook_owner(self._cookbooks.get(cookbook_id), caller)
        validate_recipe_content(content)

        recipe = content.build(str(uuid4()), cookbook.id, cookbook.owner_id, self._clock())
        stored = self._recipes.insert(recipe)
        logger.info("Recipe created: id=%s, cookbook=%s", stored.id, cookbook.id)
        return stored

    def update(self, recipe_id: str, caller_id: Optional[str], changes: dict[str, Any]) -> Recipe:
        caller = require_caller(caller_id)
        recipe = require_recipe_owner(self._recipes.get(recipe_id), caller)

        cleaned = _clean_changes(changes)
        if not cleaned:
            return recipe

        cleaned["updated_at"] = self._clock()
        updated = self._recipes.patch(recipe_id, cleaned)
        if updated is None:
            raise NotFoundError("Recipe", recipe_id)
        return updated

    def remove(self, recipe_id: str, caller_id: Optional[str]) -> None:
        caller = require_caller(caller_id)
        require_recipe_owner(self._recipes.get(recipe_id), caller)
        self._recipes.delete(recipe_id)
        logger.info("Recipe deleted: id=%s", recipe_id)

    def list_for_cookbook(self, cookbook_id: str, caller_id: Optional[str]) -> list[Recipe]:
        cookbook = self._cookbooks.get(cookbook_id)
        if cookbook is None or not can_read(cookbook, caller_id):
            return []
        return self._recipes.list_by_cookbook(cookbook_id, newest_first=True)

    def get(self, recipe_id: str, caller_id: Optional[str]) -> Optional[Recipe]:
        recipe = self._recipes.get(recipe_id)
        if recipe is None:
            return None
        cookbook = self._cookbooks.get(recipe.cookbook_id)
        if cookbook is None or not can_read(cookbook, caller_id):
            return None
        return recipe
