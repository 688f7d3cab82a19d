from __future__ import annotations

import base64
import binascii
import logging
import re
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import quote

from src.app.domain.models import Ingredient, RecipeContent
from src.services.errors import ExtractionError, InvalidImageError, RateLimitedError
from src.services.fetcher import DEFAULT_TEXT_LIMIT, DEFAULT_TIMEOUT_SECONDS, fetch_page_text
from src.services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

EXTRACT_PROMPT = Path(__file__).resolve().parents[2] / "data" / "Prompt" / "EXTRACT_RECIPE_PROMPT.txt"
PLACEHOLDER_IMAGE = "/placeholder.svg?height=400&width=600&query={query}"
DEFAULT_IMAGE_MIME = "image/jpeg"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.+)$", re.DOTALL)


def _clean_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _sanitize_ingredients(value: Any) -> List[Ingredient]:
    if not isinstance(value, list):
        return []
    items: List[Ingredient] = []
    for entry in value:
        if isinstance(entry, str):
            name = _clean_str(entry)
            if name:
                items.append(Ingredient(item=name))
            continue
        if not isinstance(entry, dict):
            continue
        name = _clean_str(entry.get("item"))
        if not name:
            continue
        items.append(Ingredient(item=name, amount=_clean_str(entry.get("amount"))))
    return items


def _sanitize_instructions(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    steps: List[str] = []
    for entry in value:
        text = _clean_str(entry)
        if text:
            steps.append(text)
    return steps


def placeholder_image_url(title: str) -> str:
    return PLACEHOLDER_IMAGE.format(query=quote(title, safe=""))


def recipe_from_payload(
    payload: dict[str, Any],
    *,
    original_url: Optional[str] = None,
    fallback_image: Optional[str] = None,
    keep_image: bool = True,
) -> RecipeContent:
    """
    Turn the model's JSON into recipe content.

    Blank fields are dropped and malformed ingredient entries skipped. A
    recipe without an image gets a placeholder derived from its title.
    """
    title = _clean_str(payload.get("title"))
    if not title:
        raise ExtractionError("Model did not find a recipe title.")

    image_url = _clean_str(payload.get("imageUrl")) if keep_image else None
    image_url = image_url or fallback_image or placeholder_image_url(title)

    return RecipeContent(
        title=title,
        description=_clean_str(payload.get("description")),
        ingredients=tuple(_sanitize_ingredients(payload.get("ingredients"))),
        instructions=tuple(_sanitize_instructions(payload.get("instructions"))),
        image_url=image_url,
        original_url=original_url,
        prep_time=_clean_str(payload.get("prepTime")),
        cook_time=_clean_str(payload.get("cookTime")),
        servings=_clean_str(payload.get("servings")),
    )


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """(mime_type, bytes) from a base64 data: URL."""
    match = _DATA_URL_RE.match((data_url or "").strip())
    if not match:
        raise InvalidImageError("Expected a base64 data: URL")
    mime_type = match.group("mime") or DEFAULT_IMAGE_MIME
    if not mime_type.startswith("image/"):
        raise InvalidImageError(f"Unsupported media type: {mime_type}")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as error:
        raise InvalidImageError(f"Invalid base64 image data: {error}") from error
    if not data:
        raise InvalidImageError("Empty image")
    return mime_type, data


def extract_from_url(
    client: GeminiClient,
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    text_limit: int = DEFAULT_TEXT_LIMIT,
) -> RecipeContent:
    page_text, og_image = fetch_page_text(url, timeout=timeout, limit=text_limit)
    prompt = (
        "Extract the recipe from the following webpage content.\n\n"
        f"Webpage content:\n{page_text}"
    )
    try:
        payload = client.generate_json(prompt, EXTRACT_PROMPT)
    except RateLimitedError:
        raise
    except (TypeError, ValueError) as error:
        raise ExtractionError(f"Failed to interpret page with AI: {error}") from error

    recipe = recipe_from_payload(payload, original_url=url.strip(), fallback_image=og_image)
    logger.info("Recipe extracted from URL: url=%s, title=%s", url, recipe.title)
    return recipe


def extract_from_image(client: GeminiClient, data_url: str) -> RecipeContent:
    image = decode_data_url(data_url)
    prompt = "Extract the recipe shown in this image."
    try:
        payload = client.generate_json(prompt, EXTRACT_PROMPT, image=image)
    except RateLimitedError:
        raise
    except (TypeError, ValueError) as error:
        raise ExtractionError(f"Failed to interpret image with AI: {error}") from error

    # A photo of a recipe card has no usable image URL of its own.
    recipe = recipe_from_payload(payload, keep_image=False)
    logger.info("Recipe extracted from image: title=%s, bytes=%d", recipe.title, len(image[1]))
    return recipe
