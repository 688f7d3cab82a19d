from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from src.app.domain.errors import RepositoryError
from src.app.domain.models import (
    Cookbook,
    Ingredient,
    Profile,
    Recipe,
    RecipeContent,
    ShareToken,
)
from src.app.infra.db.base import (
    CookbookRepository,
    ProfileRepository,
    RecipeRepository,
    ShareTokenRepository,
)

OWNER_ID = "user-alice"
OTHER_ID = "user-bob"
START = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class CookbookRepositoryStub(CookbookRepository):
    def __init__(self) -> None:
        self.rows: dict[str, Cookbook] = {}
        self.deleted: list[str] = []

    def get(self, cookbook_id: str) -> Cookbook | None:
        return self.rows.get(cookbook_id)

    def insert(self, cookbook: Cookbook) -> Cookbook:
        self.rows[cookbook.id] = cookbook
        return cookbook

    def patch(self, cookbook_id: str, changes: dict[str, Any]) -> Cookbook | None:
        current = self.rows.get(cookbook_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self.rows[cookbook_id] = updated
        return updated

    def delete(self, cookbook_id: str) -> None:
        self.rows.pop(cookbook_id, None)
        self.deleted.append(cookbook_id)

    def list_by_user(self, owner_id: str) -> list[Cookbook]:
        owned = [row for row in self.rows.values() if row.owner_id == owner_id]
        return list(reversed(owned))


class RecipeRepositoryStub(RecipeRepository):
    def __init__(self) -> None:
        self.rows: dict[str, Recipe] = {}
        self.fail_after: int | None = None
        self.fail_deletes = False
        self.insert_count = 0

    def get(self, recipe_id: str) -> Recipe | None:
        return self.rows.get(recipe_id)

    def insert(self, recipe: Recipe) -> Recipe:
        if self.fail_after is not None and self.insert_count >= self.fail_after:
            raise RepositoryError("insert_recipe", "connection reset")
        self.insert_count += 1
        self.rows[recipe.id] = recipe
        return recipe

    def patch(self, recipe_id: str, changes: dict[str, Any]) -> Recipe | None:
        current = self.rows.get(recipe_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self.rows[recipe_id] = updated
        return updated

    def delete(self, recipe_id: str) -> None:
        if self.fail_deletes:
            raise RepositoryError("delete_recipe", "connection reset")
        self.rows.pop(recipe_id, None)

    def list_by_cookbook(self, cookbook_id: str, newest_first: bool = False) -> list[Recipe]:
        found = [row for row in self.rows.values() if row.cookbook_id == cookbook_id]
        return list(reversed(found)) if newest_first else found


class ShareTokenRepositoryStub(ShareTokenRepository):
    def __init__(self) -> None:
        self.rows: dict[str, ShareToken] = {}
        self.refuse_increment = False
        self.increment_error: Exception | None = None
        self.increment_calls: list[str] = []

    def insert(self, share: ShareToken) -> ShareToken:
        self.rows[share.id] = share
        return share

    def get_by_token(self, token: str) -> ShareToken | None:
        for share in self.rows.values():
            if share.token == token:
                return share
        return None

    def list_by_cookbook(self, cookbook_id: str) -> list[ShareToken]:
        return [row for row in self.rows.values() if row.cookbook_id == cookbook_id]

    def increment_usage(self, share_id: str, now: datetime) -> ShareToken | None:
        self.increment_calls.append(share_id)
        if self.increment_error is not None:
            raise self.increment_error
        share = self.rows.get(share_id)
        if share is None or self.refuse_increment or not share.is_alive(now):
            return None
        share.usage_count += 1
        return share

    def delete(self, share_id: str) -> None:
        self.rows.pop(share_id, None)


class ProfileRepositoryStub(ProfileRepository):
    def __init__(self) -> None:
        self.rows: dict[str, Profile] = {}

    def get(self, user_id: str) -> Profile | None:
        return self.rows.get(user_id)


def make_content(title: str = "Pancakes", **overrides: Any) -> RecipeContent:
    fields: dict[str, Any] = {
        "title": title,
        "description": f"{title} description",
        "ingredients": (Ingredient(item="flour", amount="200 g"), Ingredient(item="salt")),
        "instructions": ("Mix", "Cook"),
        "image_url": "https://img.test/pancakes.jpg",
        "original_url": "https://recipes.test/pancakes",
        "prep_time": "10 mins",
        "cook_time": "15 mins",
        "servings": "4",
    }
    fields.update(overrides)
    return RecipeContent(**fields)


RECIPE_PAYLOAD: dict[str, Any] = {
    "title": "  Pumpkin Pie ",
    "description": "Classic autumn dessert",
    "ingredients": [
        {"item": "pumpkin puree", "amount": "425 g"},
        {"item": "eggs", "amount": 2},
        {"item": "  ", "amount": "1 tsp"},
        "pinch of salt",
        42,
    ],
    "instructions": ["Whisk", "", "Bake", None],
    "imageUrl": "https://img.test/pie.jpg",
    "prepTime": "20 mins",
    "cookTime": "",
    "servings": 8,
}


class GeminiClientStub:
    def __init__(self, payload: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.payload = payload if payload is not None else dict(RECIPE_PAYLOAD)
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def generate_json(
        self,
        user_prompt: str,
        system_prompt_path: Path,
        image: tuple[str, bytes] | None = None,
    ) -> dict[str, Any]:
        self.calls.append({"prompt": user_prompt, "path": system_prompt_path, "image": image})
        if self.error is not None:
            raise self.error
        return self.payload
