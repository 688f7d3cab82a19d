# src/app/domain/access.py
"""
Ownership guard shared by every cookbook-scoped operation.

Commands call the require_* helpers and get an exception back; queries call
the boolean predicates and hide whatever the caller is not allowed to see.
"""
from __future__ import annotations

from typing import Optional

from src.app.domain.errors import UnauthenticatedError, UnauthorizedError
from src.app.domain.models import Cookbook, Recipe


def is_owner(owner_id: str, caller_id: Optional[str]) -> bool:
    return caller_id is not None and owner_id == caller_id


def can_read(cookbook: Cookbook, caller_id: Optional[str]) -> bool:
    return is_owner(cookbook.owner_id, caller_id) or cookbook.is_public


def require_caller(caller_id: Optional[str]) -> str:
    if not caller_id:
        raise UnauthenticatedError()
    return caller_id


def require_cookbook_owner(cookbook: Optional[Cookbook], caller_id: str) -> Cookbook:
    # A missing cookbook is reported the same way as someone else's.
    if cookbook is None or not is_owner(cookbook.owner_id, caller_id):
        raise UnauthorizedError()
    return cookbook


def require_recipe_owner(recipe: Optional[Recipe], caller_id: str) -> Recipe:
    if recipe is None or not is_owner(recipe.owner_id, caller_id):
        raise UnauthorizedError()
    return recipe
