# src/app/infra/db/base.py
"""
Abstract repositories over the document store.
Services depend on these interfaces so the backing store can be swapped.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from src.app.domain.models import Cookbook, Profile, Recipe, ShareToken


class CookbookRepository(ABC):
    """
    Keyed access to cookbooks plus the by_user index.

    Implementations:
    - SupabaseCookbookRepository: `cookbooks` table
    """

    @abstractmethod
    def get(self, cookbook_id: str) -> Optional[Cookbook]:
        """Return the cookbook, or None if it does not exist."""
        pass

    @abstractmethod
    def insert(self, cookbook: Cookbook) -> Cookbook:
        """Persist a fully built cookbook and return the stored record."""
        pass

    @abstractmethod
    def patch(self, cookbook_id: str, changes: dict[str, Any]) -> Optional[Cookbook]:
        """
        Apply a partial update.

        Args:
            cookbook_id: The cookbook to update
            changes: Domain field names mapped to new values

        Returns:
            The updated cookbook, or None if it does not exist
        """
        pass

    @abstractmethod
    def delete(self, cookbook_id: str) -> None:
        pass

    @abstractmethod
    def list_by_user(self, owner_id: str) -> list[Cookbook]:
        """Cookbooks owned by a user, newest first."""
        pass


class RecipeRepository(ABC):
    """Keyed access to recipes plus the by_cookbook index."""

    @abstractmethod
    def get(self, recipe_id: str) -> Optional[Recipe]:
        pass

    @abstractmethod
    def insert(self, recipe: Recipe) -> Recipe:
        pass

    @abstractmethod
    def patch(self, recipe_id: str, changes: dict[str, Any]) -> Optional[Recipe]:
        pass

    @abstractmethod
    def delete(self, recipe_id: str) -> None:
        pass

    @abstractmethod
    def list_by_cookbook(self, cookbook_id: str, newest_first: bool = False) -> list[Recipe]:
        """
        Recipes of a cookbook ordered by creation time.

        Args:
            cookbook_id: The parent cookbook
            newest_first: Descending order when True, insertion order otherwise
        """
        pass


class ShareTokenRepository(ABC):
    """Share links, indexed by token string and by cookbook."""

    @abstractmethod
    def insert(self, share: ShareToken) -> ShareToken:
        pass

    @abstractmethod
    def get_by_token(self, token: str) -> Optional[ShareToken]:
        pass

    @abstractmethod
    def list_by_cookbook(self, cookbook_id: str) -> list[ShareToken]:
        pass

    @abstractmethod
    def increment_usage(self, share_id: str, now: datetime) -> Optional[ShareToken]:
        """
        Atomically add one use to a share link that is still alive.

        The liveness check and the increment happen in one store operation,
        so two redeemers racing for the last use cannot both succeed.

        Args:
            share_id: The share record
            now: Reference time for the expiry check

        Returns:
            The updated record, or None if the link was already dead
        """
        pass

    @abstractmethod
    def delete(self, share_id: str) -> None:
        pass


class ProfileRepository(ABC):
    """Read-only view of user display data."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[Profile]:
        pass
