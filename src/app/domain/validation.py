from __future__ import annotations

from typing import Optional

from src.app.domain.errors import ValidationFailureError
from src.app.domain.models import RecipeContent


def require_text(field: str, value: Optional[str]) -> str:
    """Trimmed, non-empty text or ValidationFailureError."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationFailureError(field, "must not be empty")
    return cleaned


def optional_int_at_least(field: str, value: Optional[int], minimum: int) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationFailureError(field, "must be an integer")
    if value < minimum:
        raise ValidationFailureError(field, f"must be >= {minimum}")
    return value


def validate_recipe_content(content: RecipeContent) -> RecipeContent:
    require_text("title", content.title)
    for position, ingredient in enumerate(content.ingredients):
        if not (ingredient.item or "").strip():
            raise ValidationFailureError(f"ingredients[{position}].item", "must not be empty")
    return content
