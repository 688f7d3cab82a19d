# src/app/services/cookbook_service.py
"""
Cookbook management.
Create, read, update and delete cookbooks behind the ownership guard.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

from src.app.domain.access import can_read, require_caller, require_cookbook_owner
from src.app.domain.errors import NotFoundError
from src.app.domain.models import Cookbook
from src.app.domain.validation import require_text
from src.app.infra.db.base import CookbookRepository, RecipeRepository, ShareTokenRepository
from src.app.services.cookbook_copy import CookbookDuplicationEngine

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class CookbookService:
    def __init__(
        self,
        cookbooks: CookbookRepository,
        recipes: RecipeRepository,
        shares: ShareTokenRepository,
        copier: CookbookDuplicationEngine,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._cookbooks = cookbooks
        self._recipes = recipes
        self._shares = shares
        self._copier = copier
        self._clock = clock or _now_utc

    def create(self, caller_id: Optional[str], name: str, description: Optional[str] = None) -> Cookbook:
        caller = require_caller(caller_id)
        now = self._clock()
        cookbook = Cookbook(
            id=str(uuid4()),
            owner_id=caller,
            name=require_text("name", name),
            description=(description or "").strip() or None,
            is_public=False,
            created_at=now,
            updated_at=now,
        )
        stored = self._cookbooks.insert(cookbook)
        logger.info("Cookbook created: id=%s, owner=%s", stored.id, caller)
        return stored

    def list_for_user(self, caller_id: Optional[str]) -> list[Cookbook]:
        if not caller_id:
            return []
        return self._cookbooks.list_by_user(caller_id)

    def get(self, cookbook_id: str, caller_id: Optional[str]) -> Optional[Cookbook]:
        cookbook = self._cookbooks.get(cookbook_id)
        if cookbook is None or not can_read(cookbook, caller_id):
            return None
        return cookbook

    def update(
        self,
        cookbook_id: str,
        caller_id: Optional[str],
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Cookbook:
        """
        Partial update by the owner.

        Fields left as None are untouched; an empty description clears it.
        copied_from can never change.
        """
        caller = require_caller(caller_id)
        cookbook = require_cookbook_owner(self._cookbooks.get(cookbook_id), caller)

        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = require_text("name", name)
        if description is not None:
            changes["description"] = description.strip() or None
        if is_public is not None:
            changes["is_public"] = bool(is_public)
        if not changes:
            return cookbook

        changes["updated_at"] = self._clock()
        updated = self._cookbooks.patch(cookbook_id, changes)
        if updated is None:
            raise NotFoundError("Cookbook", cookbook_id)
        return updated

    def remove(self, cookbook_id: str, caller_id: Optional[str]) -> None:
        """Delete a cookbook with its recipes and share links."""
        caller = require_caller(caller_id)
        require_cookbook_owner(self._cookbooks.get(cookbook_id), caller)

        recipes = self._recipes.list_by_cookbook(cookbook_id)
        for recipe in recipes:
            self._recipes.delete(recipe.id)

        shares = self._shares.list_by_cookbook(cookbook_id)
        for share in shares:
            self._shares.delete(share.id)

        self._cookbooks.delete(cookbook_id)
        logger.info(
            "Cookbook deleted: id=%s, recipes=%d, share_links=%d",
            cookbook_id, len(recipes), len(shares),
        )

    def copy(self, source_cookbook_id: str, caller_id: Optional[str], new_name: str) -> str:
        """
        Copy a cookbook the caller can read into the caller's account.

        Private cookbooks of other users are reported as missing; those are
        only reachable through a share link.
        """
        caller = require_caller(caller_id)
        if self.get(source_cookbook_id, caller) is None:
            raise NotFoundError("Cookbook", source_cookbook_id)
        return self._copier.copy(source_cookbook_id, caller, new_name)
