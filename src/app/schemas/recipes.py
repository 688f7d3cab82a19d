# src/app/schemas/recipes.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.app.domain.models import Ingredient, Recipe, RecipeContent


def format_timestamp(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    return str(value)


class IngredientItem(BaseModel):
    item: str = Field(..., min_length=1)
    amount: Optional[str] = None


class RecipeCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    ingredients: list[IngredientItem] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    imageUrl: Optional[str] = None
    originalUrl: Optional[str] = None
    prepTime: Optional[str] = None
    cookTime: Optional[str] = None
    servings: Optional[str] = None

    def to_content(self) -> RecipeContent:
        return RecipeContent(
            title=self.title,
            description=self.description,
            ingredients=tuple(Ingredient(item=i.item, amount=i.amount) for i in self.ingredients),
            instructions=tuple(self.instructions),
            image_url=self.imageUrl,
            original_url=self.originalUrl,
            prep_time=self.prepTime,
            cook_time=self.cookTime,
            servings=self.servings,
        )


class RecipeUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    ingredients: Optional[list[IngredientItem]] = None
    instructions: Optional[list[str]] = None
    imageUrl: Optional[str] = None
    prepTime: Optional[str] = None
    cookTime: Optional[str] = None
    servings: Optional[str] = None

    def to_changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent, keyed by domain name."""
        renames = {
            "imageUrl": "image_url",
            "prepTime": "prep_time",
            "cookTime": "cook_time",
        }
        sent = self.model_dump(exclude_unset=True)
        return {renames.get(key, key): value for key, value in sent.items()}


class ExtractFromUrlRequest(BaseModel):
    url: str = Field(..., min_length=1)


class ExtractFromImageRequest(BaseModel):
    imageDataUrl: str = Field(..., min_length=1)


class RecipeResponse(BaseModel):
    id: str
    cookbookId: str
    ownerId: str
    title: str
    description: Optional[str] = None
    ingredients: list[IngredientItem] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    imageUrl: Optional[str] = None
    originalUrl: Optional[str] = None
    prepTime: Optional[str] = None
    cookTime: Optional[str] = None
    servings: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


def recipe_response(recipe: Recipe) -> RecipeResponse:
    return RecipeResponse(
        id=recipe.id,
        cookbookId=recipe.cookbook_id,
        ownerId=recipe.owner_id,
        title=recipe.title,
        description=recipe.description,
        ingredients=[IngredientItem(item=i.item, amount=i.amount) for i in recipe.ingredients],
        instructions=list(recipe.instructions),
        imageUrl=recipe.image_url,
        originalUrl=recipe.original_url,
        prepTime=recipe.prep_time,
        cookTime=recipe.cook_time,
        servings=recipe.servings,
        createdAt=format_timestamp(recipe.created_at),
        updatedAt=format_timestamp(recipe.updated_at),
    )
