from __future__ import annotations

import base64
from typing import Any, Optional

import pytest

from src.app.domain.models import Ingredient
from src.services import extract
from src.services.errors import ExtractionError, InvalidImageError, RateLimitedError
from src.services.extract import (
    EXTRACT_PROMPT,
    decode_data_url,
    extract_from_image,
    extract_from_url,
    placeholder_image_url,
    recipe_from_payload,
)
from tests.unit.stubs import RECIPE_PAYLOAD as PAYLOAD, GeminiClientStub

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


class TestRecipeFromPayload:
    def test_sanitizes_fields(self) -> None:
        recipe = recipe_from_payload(PAYLOAD, original_url="https://recipes.test/pie")

        assert recipe.title == "Pumpkin Pie"
        assert recipe.ingredients == (
            Ingredient("pumpkin puree", "425 g"),
            Ingredient("eggs", "2"),
            Ingredient("pinch of salt"),
        )
        assert recipe.instructions == ("Whisk", "Bake")
        assert recipe.prep_time == "20 mins"
        assert recipe.cook_time is None
        assert recipe.servings == "8"
        assert recipe.image_url == "https://img.test/pie.jpg"
        assert recipe.original_url == "https://recipes.test/pie"

    def test_missing_title(self) -> None:
        with pytest.raises(ExtractionError):
            recipe_from_payload({"title": "   ", "ingredients": []})

    def test_non_list_sections_become_empty(self) -> None:
        recipe = recipe_from_payload({"title": "Toast", "ingredients": "bread", "instructions": {}})

        assert recipe.ingredients == ()
        assert recipe.instructions == ()

    def test_fallback_image_used_when_model_has_none(self) -> None:
        recipe = recipe_from_payload({"title": "Toast"}, fallback_image="https://img.test/og.jpg")

        assert recipe.image_url == "https://img.test/og.jpg"

    def test_placeholder_when_no_image(self) -> None:
        recipe = recipe_from_payload({"title": "Mac & Cheese"})

        assert recipe.image_url == placeholder_image_url("Mac & Cheese")
        assert recipe.image_url.endswith("query=Mac%20%26%20Cheese")

    def test_keep_image_false_ignores_model_image(self) -> None:
        recipe = recipe_from_payload(PAYLOAD, keep_image=False)

        assert recipe.image_url == placeholder_image_url("Pumpkin Pie")


class TestDecodeDataUrl:
    def test_decodes_png(self) -> None:
        assert decode_data_url(PNG_DATA_URL) == ("image/png", PNG_BYTES)

    def test_defaults_to_jpeg(self) -> None:
        data_url = "data:;base64," + base64.b64encode(b"jpeg").decode()

        assert decode_data_url(data_url) == ("image/jpeg", b"jpeg")

    @pytest.mark.parametrize(
        "data_url",
        [
            "",
            "https://img.test/pie.jpg",
            "data:image/png;base64,@@not-base64@@",
            "data:application/pdf;base64," + base64.b64encode(b"%PDF").decode(),
        ],
    )
    def test_rejects_invalid(self, data_url: str) -> None:
        with pytest.raises(InvalidImageError):
            decode_data_url(data_url)


class TestExtractFromUrl:
    def test_extracts_with_page_text(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: dict[str, Any] = {}

        def fake_fetch(url: str, timeout: float, limit: int) -> tuple[str, Optional[str]]:
            seen.update(url=url, timeout=timeout, limit=limit)
            return "Pumpkin pie. Whisk then bake.", "https://img.test/og.jpg"

        monkeypatch.setattr(extract, "fetch_page_text", fake_fetch)
        client = GeminiClientStub()

        recipe = extract_from_url(client, " https://recipes.test/pie ", timeout=5.0, text_limit=500)

        assert seen == {"url": " https://recipes.test/pie ", "timeout": 5.0, "limit": 500}
        assert "Pumpkin pie. Whisk then bake." in client.calls[0]["prompt"]
        assert client.calls[0]["path"] == EXTRACT_PROMPT
        assert client.calls[0]["image"] is None
        assert recipe.title == "Pumpkin Pie"
        assert recipe.original_url == "https://recipes.test/pie"
        assert recipe.image_url == "https://img.test/pie.jpg"

    def test_og_image_fills_missing_model_image(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            extract, "fetch_page_text", lambda url, timeout, limit: ("text", "https://img.test/og.jpg")
        )
        client = GeminiClientStub(payload={"title": "Soup"})

        recipe = extract_from_url(client, "https://recipes.test/soup")

        assert recipe.image_url == "https://img.test/og.jpg"

    def test_rate_limit_propagates(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(extract, "fetch_page_text", lambda url, timeout, limit: ("text", None))
        client = GeminiClientStub(error=RateLimitedError("slow down"))

        with pytest.raises(RateLimitedError):
            extract_from_url(client, "https://recipes.test/soup")

    def test_model_value_error_becomes_extraction_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(extract, "fetch_page_text", lambda url, timeout, limit: ("text", None))
        client = GeminiClientStub(error=ValueError("bad"))

        with pytest.raises(ExtractionError):
            extract_from_url(client, "https://recipes.test/soup")


class TestExtractFromImage:
    def test_sends_image_and_uses_placeholder(self) -> None:
        client = GeminiClientStub()

        recipe = extract_from_image(client, PNG_DATA_URL)

        assert client.calls[0]["image"] == ("image/png", PNG_BYTES)
        assert recipe.title == "Pumpkin Pie"
        assert recipe.original_url is None
        assert recipe.image_url == placeholder_image_url("Pumpkin Pie")

    def test_invalid_image_never_reaches_model(self) -> None:
        client = GeminiClientStub()

        with pytest.raises(InvalidImageError):
            extract_from_image(client, "data:text/plain;base64,aGk=")
        assert client.calls == []


class TestPromptFile:
    def test_prompt_file_exists(self) -> None:
        assert EXTRACT_PROMPT.is_file()
        assert "ingredients" in EXTRACT_PROMPT.read_text(encoding="utf-8")
