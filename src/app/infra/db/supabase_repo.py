from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from src.app.domain.errors import RepositoryError
from src.app.domain.models import (
    CopiedFrom,
    Cookbook,
    Ingredient,
    Profile,
    Recipe,
    ShareToken,
)
from src.app.infra.db.base import (
    CookbookRepository,
    ProfileRepository,
    RecipeRepository,
    ShareTokenRepository,
)

logger = logging.getLogger(__name__)

# supabase-py surfaces transport failures from httpx and query failures from postgrest
_STORE_ERRORS = (ConnectionError, TimeoutError, httpx.HTTPError, APIError)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _safe_int(value: object, default: int = 0) -> int:
    return int(value) if value else default


def _safe_str(value: object) -> str | None:
    return str(value) if value else None


def _create_supabase_client() -> Client:
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
    return create_client(url, key)


def _first(rows: list[dict[str, Any]] | None) -> dict[str, Any] | None:
    return rows[0] if rows else None


def _row_to_cookbook(row: dict[str, Any]) -> Cookbook:
    copied = row.get("copied_from")
    copied_from = None
    if isinstance(copied, dict) and copied.get("source_cookbook_id"):
        copied_from = CopiedFrom(
            source_cookbook_id=str(copied["source_cookbook_id"]),
            owner_name=str(copied.get("owner_name") or ""),
        )
    return Cookbook(
        id=str(row["id"]),
        owner_id=str(row["owner_id"]),
        name=str(row.get("name") or ""),
        description=_safe_str(row.get("description")),
        is_public=bool(row.get("is_public")),
        copied_from=copied_from,
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def _cookbook_to_row(cookbook: Cookbook) -> dict[str, Any]:
    copied_from = None
    if cookbook.copied_from:
        copied_from = {
            "source_cookbook_id": cookbook.copied_from.source_cookbook_id,
            "owner_name": cookbook.copied_from.owner_name,
        }
    return {
        "id": cookbook.id,
        "owner_id": cookbook.owner_id,
        "name": cookbook.name,
        "description": cookbook.description,
        "is_public": cookbook.is_public,
        "copied_from": copied_from,
        "created_at": _format_datetime(cookbook.created_at),
        "updated_at": _format_datetime(cookbook.updated_at),
    }


def _ingredients_to_json(ingredients: list[Ingredient] | tuple[Ingredient, ...]) -> list[dict[str, Any]]:
    return [{"item": ing.item, "amount": ing.amount} for ing in ingredients]


def _row_to_recipe(row: dict[str, Any]) -> Recipe:
    ingredients = [
        Ingredient(item=str(entry.get("item") or ""), amount=_safe_str(entry.get("amount")))
        for entry in (row.get("ingredients") or [])
        if isinstance(entry, dict)
    ]
    return Recipe(
        id=str(row["id"]),
        cookbook_id=str(row["cookbook_id"]),
        owner_id=str(row["owner_id"]),
        title=str(row.get("title") or ""),
        description=_safe_str(row.get("description")),
        ingredients=ingredients,
        instructions=[str(step) for step in (row.get("instructions") or [])],
        image_url=_safe_str(row.get("image_url")),
        original_url=_safe_str(row.get("original_url")),
        prep_time=_safe_str(row.get("prep_time")),
        cook_time=_safe_str(row.get("cook_time")),
        servings=_safe_str(row.get("servings")),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def _recipe_to_row(recipe: Recipe) -> dict[str, Any]:
    return {
        "id": recipe.id,
        "cookbook_id": recipe.cookbook_id,
        "owner_id": recipe.owner_id,
        "title": recipe.title,
        "description": recipe.description,
        "ingredients": _ingredients_to_json(recipe.ingredients),
        "instructions": list(recipe.instructions),
        "image_url": recipe.image_url,
        "original_url": recipe.original_url,
        "prep_time": recipe.prep_time,
        "cook_time": recipe.cook_time,
        "servings": recipe.servings,
        "created_at": _format_datetime(recipe.created_at),
        "updated_at": _format_datetime(recipe.updated_at),
    }


def _row_to_share(row: dict[str, Any]) -> ShareToken:
    max_usages = row.get("max_usages")
    return ShareToken(
        id=str(row["id"]),
        cookbook_id=str(row["cookbook_id"]),
        token=str(row["share_token"]),
        created_by=str(row["created_by"]),
        usage_count=_safe_int(row.get("usage_count")),
        max_usages=int(max_usages) if max_usages is not None else None,
        expires_at=_parse_datetime(row.get("expires_at")),
        created_at=_parse_datetime(row.get("created_at")),
    )


def _share_to_row(share: ShareToken) -> dict[str, Any]:
    return {
        "id": share.id,
        "cookbook_id": share.cookbook_id,
        "share_token": share.token,
        "created_by": share.created_by,
        "usage_count": share.usage_count,
        "max_usages": share.max_usages,
        "expires_at": _format_datetime(share.expires_at),
        "created_at": _format_datetime(share.created_at),
    }


def _changes_to_row(changes: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for key, value in changes.items():
        if isinstance(value, datetime):
            row[key] = value.isoformat()
        elif key == "ingredients":
            row[key] = _ingredients_to_json(value)
        elif key == "instructions":
            row[key] = list(value)
        else:
            row[key] = value
    return row


class SupabaseCookbookRepository(CookbookRepository):
    TABLE_NAME = "cookbooks"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def get(self, cookbook_id: str) -> Cookbook | None:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("id", cookbook_id)
                .limit(1)
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error getting cookbook: %s", error)
            raise RepositoryError("get_cookbook", str(error)) from error
        row = _first(result.data)
        return _row_to_cookbook(row) if row else None

    def insert(self, cookbook: Cookbook) -> Cookbook:
        try:
            result = self._client.table(self.TABLE_NAME).insert(_cookbook_to_row(cookbook)).execute()
        except _STORE_ERRORS as error:
            logger.error("Store error inserting cookbook: %s", error)
            raise RepositoryError("insert_cookbook", str(error)) from error
        row = _first(result.data)
        if not row:
            raise RepositoryError("insert_cookbook", "no row returned")
        return _row_to_cookbook(row)

    def patch(self, cookbook_id: str, changes: dict[str, Any]) -> Cookbook | None:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .update(_changes_to_row(changes))
                .eq("id", cookbook_id)
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error updating cookbook: %s", error)
            raise RepositoryError("patch_cookbook", str(error)) from error
        row = _first(result.data)
        return _row_to_cookbook(row) if row else None

    def delete(self, cookbook_id: str) -> None:
        try:
            self._client.table(self.TABLE_NAME).delete().eq("id", cookbook_id).execute()
        except _STORE_ERRORS as error:
            logger.error("Store error deleting cookbook: %s", error)
            raise RepositoryError("delete_cookbook", str(error)) from error

    def list_by_user(self, owner_id: str) -> list[Cookbook]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("owner_id", owner_id)
                .order("created_at", desc=True)
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error listing cookbooks: %s", error)
            raise RepositoryError("list_cookbooks", str(error)) from error
        return [_row_to_cookbook(row) for row in (result.data or [])]


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def get(self, recipe_id: str) -> Recipe | None:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("id", recipe_id)
                .limit(1)
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error getting recipe: %s", error)
            raise RepositoryError("get_recipe", str(error)) from error
        row = _first(result.data)
        return _row_to_recipe(row) if row else None

    def insert(self, recipe: Recipe) -> Recipe:
        try:
            result = self._client.table(self.TABLE_NAME).insert(_recipe_to_row(recipe)).execute()
        except _STORE_ERRORS as error:
            logger.error("Store error inserting recipe: %s", error)
            raise RepositoryError("insert_recipe", str(error)) from error
        row = _first(result.data)
        if not row:
            raise RepositoryError("insert_recipe", "no row returned")
        return _row_to_recipe(row)

    def patch(self, recipe_id: str, changes: dict[str, Any]) -> Recipe | None:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .update(_changes_to_row(changes))
                .eq("id", recipe_id)
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error updating recipe: %s", error)
            raise RepositoryError("patch_recipe", str(error)) from error
        row = _first(result.data)
        return _row_to_recipe(row) if row else None

    def delete(self, recipe_id: str) -> None:
        try:
            self._client.table(self.TABLE_NAME).delete().eq("id", recipe_id).execute()
        except _STORE_ERRORS as error:
            logger.error("Store error deleting recipe: %s", error)
            raise RepositoryError("delete_recipe", str(error)) from error

    def list_by_cookbook(self, cookbook_id: str, newest_first: bool = False) -> list[Recipe]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("cookbook_id", cookbook_id)
                .order("created_at", desc=newest_first)
                .order("id", desc=newest_first)
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error listing recipes: %s", error)
            raise RepositoryError("list_recipes", str(error)) from error
        return [_row_to_recipe(row) for row in (result.data or [])]


class SupabaseShareTokenRepository(ShareTokenRepository):
    TABLE_NAME = "cookbook_shares"
    INCREMENT_RPC = "increment_share_usage"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def insert(self, share: ShareToken) -> ShareToken:
        try:
            result = self._client.table(self.TABLE_NAME).insert(_share_to_row(share)).execute()
        except _STORE_ERRORS as error:
            logger.error("Store error inserting share link: %s", error)
            raise RepositoryError("insert_share", str(error)) from error
        row = _first(result.data)
        if not row:
            raise RepositoryError("insert_share", "no row returned")
        return _row_to_share(row)

    def get_by_token(self, token: str) -> ShareToken | None:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("share_token", token)
                .limit(1)
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error looking up share token: %s", error)
            raise RepositoryError("get_share_by_token", str(error)) from error
        row = _first(result.data)
        return _row_to_share(row) if row else None

    def list_by_cookbook(self, cookbook_id: str) -> list[ShareToken]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("cookbook_id", cookbook_id)
                .order("created_at")
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error listing share links: %s", error)
            raise RepositoryError("list_shares", str(error)) from error
        return [_row_to_share(row) for row in (result.data or [])]

    def increment_usage(self, share_id: str, now: datetime) -> ShareToken | None:
        try:
            result = self._client.rpc(
                self.INCREMENT_RPC,
                {"p_share_id": share_id, "p_now": now.isoformat()},
            ).execute()
        except _STORE_ERRORS as error:
            logger.error("Store error incrementing share usage: %s", error)
            raise RepositoryError("increment_share_usage", str(error)) from error
        row = _first(result.data)
        if not row:
            logger.info("Share usage increment refused: id=%s", share_id)
            return None
        return _row_to_share(row)

    def delete(self, share_id: str) -> None:
        try:
            self._client.table(self.TABLE_NAME).delete().eq("id", share_id).execute()
        except _STORE_ERRORS as error:
            logger.error("Store error deleting share link: %s", error)
            raise RepositoryError("delete_share", str(error)) from error


class SupabaseProfileRepository(ProfileRepository):
    TABLE_NAME = "profiles"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def get(self, user_id: str) -> Profile | None:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("id,name,email")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except _STORE_ERRORS as error:
            logger.error("Store error getting profile: %s", error)
            raise RepositoryError("get_profile", str(error)) from error
        row = _first(result.data)
        if not row:
            return None
        return Profile(
            id=str(row["id"]),
            name=_safe_str(row.get("name")),
            email=_safe_str(row.get("email")),
        )
