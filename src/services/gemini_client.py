from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import google.generativeai as genai
from google.api_core.exceptions import ResourceExhausted

from src.services.errors import ExtractionError, RateLimitedError, ServiceError


class GeminiConfigurationError(ServiceError):
    pass


class GeminiPromptError(ServiceError):
    pass


class GeminiClient:
    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash") -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._configure_api()

    def _configure_api(self) -> None:
        if not self.api_key:
            raise GeminiConfigurationError("Missing Google API key.")
        genai.configure(api_key=self.api_key)

    def _load_system_prompt(self, file_path: Path) -> str:
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError as not_found_error:
            raise GeminiPromptError(f"Prompt file not found: {file_path}") from not_found_error
        except (OSError, IOError) as io_error:
            raise GeminiPromptError(f"Unable to read prompt file: {io_error}") from io_error

    def _build_parts(self, user_prompt: str, image: tuple[str, bytes] | None) -> list[Any]:
        parts: list[Any] = [user_prompt]
        if image is not None:
            mime_type, data = image
            parts.append({"mime_type": mime_type, "data": data})
        return parts

    def generate_json(
        self,
        user_prompt: str,
        system_prompt_path: Path,
        image: tuple[str, bytes] | None = None,
    ) -> dict[str, Any]:
        """
        Ask the model for a JSON object.

        Args:
            user_prompt: Text part of the request
            system_prompt_path: File holding the system instruction
            image: Optional (mime_type, bytes) sent alongside the text
        """
        system_instruction = self._load_system_prompt(system_prompt_path)
        model = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_instruction,
            generation_config={"response_mime_type": "application/json"},
        )

        try:
            response = model.generate_content(self._build_parts(user_prompt, image))
        except ResourceExhausted as err:
            raise RateLimitedError("Gemini API rate limit reached. Try again shortly.") from err

        try:
            text = response.text
        except ValueError as error:
            # raised by the SDK when the candidate was blocked or empty
            raise ExtractionError(f"Model returned no usable candidate: {error}") from error
        if not text:
            raise ExtractionError("Model response did not include text content.")
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as error:
            raise ExtractionError(f"Model returned invalid JSON: {error}") from error
        if not isinstance(payload, dict):
            raise ExtractionError("Model returned JSON that is not an object.")
        return payload
