# src/app/services/cookbook_copy.py
"""
Cookbook duplication.
Clones a cookbook and every recipe in it into another user's account.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from src.app.domain.errors import CopyFailedError, NotFoundError, RepositoryError
from src.app.domain.models import (
    CopiedFrom,
    Cookbook,
    Recipe,
    RecipeContent,
    display_name,
)
from src.app.domain.validation import require_text
from src.app.infra.db.base import CookbookRepository, ProfileRepository, RecipeRepository

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class CookbookDuplicationEngine:
    """
    Deep copy of a cookbook into a new owner's namespace.

    The engine performs no authorization: callers decide who may copy what
    (a share link, or read access to the source).

    The store has no multi-record transactions, so a failure while copying
    recipes is undone by deleting what was already written.
    """

    def __init__(
        self,
        cookbooks: CookbookRepository,
        recipes: RecipeRepository,
        profiles: ProfileRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._cookbooks = cookbooks
        self._recipes = recipes
        self._profiles = profiles
        self._clock = clock or _now_utc

    def copy(self, source_cookbook_id: str, new_owner_id: str, new_name: str) -> str:
        """
        Copy a cookbook with all of its recipes.

        Args:
            source_cookbook_id: The cookbook to clone
            new_owner_id: Owner of the copy
            new_name: Name of the copy

        Returns:
            Id of the new cookbook

        Raises:
            ValidationFailureError: If new_name is blank
            NotFoundError: If the source cookbook does not exist
            CopyFailedError: If writing the copy failed
        """
        name = require_text("name", new_name)
        source = self._cookbooks.get(source_cookbook_id)
        if source is None:
            raise NotFoundError("Cookbook", source_cookbook_id)

        owner_name = display_name(self._profiles.get(source.owner_id))
        source_recipes = self._recipes.list_by_cookbook(source.id)

        now = self._clock()
        clone = Cookbook(
            id=str(uuid4()),
            owner_id=new_owner_id,
            name=name,
            description=source.description,
            is_public=False,
            copied_from=CopiedFrom(source_cookbook_id=source.id, owner_name=owner_name),
            created_at=now,
            updated_at=now,
        )
        self._cookbooks.insert(clone)

        inserted: list[Recipe] = []
        try:
            for recipe in source_recipes:
                content = RecipeContent.from_recipe(recipe)
                inserted.append(
                    self._recipes.insert(
                        content.build(str(uuid4()), clone.id, new_owner_id, self._clock())
                    )
                )
        except RepositoryError as error:
            logger.error(
                "Copy failed after %d/%d recipes: source=%s, error=%s",
                len(inserted), len(source_recipes), source.id, error,
            )
            rolled_back = self._rollback(clone.id, inserted)
            raise CopyFailedError(source.id, error.reason, rolled_back=rolled_back) from error

        logger.info(
            "Cookbook copied: source=%s, copy=%s, owner=%s, recipes=%d",
            source.id, clone.id, new_owner_id, len(inserted),
        )
        return clone.id

    def discard(self, cookbook_id: str) -> None:
        """Delete a copy together with its recipes."""
        for recipe in self._recipes.list_by_cookbook(cookbook_id):
            self._recipes.delete(recipe.id)
        self._cookbooks.delete(cookbook_id)
        logger.info("Discarded cookbook copy: id=%s", cookbook_id)

    def _rollback(self, cookbook_id: str, inserted: list[Recipe]) -> bool:
        try:
            for recipe in inserted:
                self._recipes.delete(recipe.id)
            self._cookbooks.delete(cookbook_id)
        except RepositoryError as error:
            logger.exception("Rollback of cookbook copy failed: id=%s, error=%s", cookbook_id, error)
            return False
        return True
