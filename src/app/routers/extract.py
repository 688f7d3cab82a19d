# src/app/routers/extract.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from src.app.config import settings
from src.app.deps import CurrentUser, get_current_user, get_gemini_client, get_recipe_service
from src.app.domain.errors import CookbookError
from src.app.routers.errors import domain_http_error, service_http_error
from src.app.schemas.recipes import (
    ExtractFromImageRequest,
    ExtractFromUrlRequest,
    RecipeResponse,
    recipe_response,
)
from src.app.services.recipe_service import RecipeService
from src.services import extract as extractor
from src.services.errors import ServiceError
from src.services.gemini_client import GeminiClient

log = logging.getLogger("extract")
router = APIRouter(prefix="/cookbooks/{cookbook_id}/recipes/extract", tags=["extract"])


@router.post("/url", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def extract_recipe_from_url(
    cookbook_id: str,
    payload: ExtractFromUrlRequest,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
    client: GeminiClient = Depends(get_gemini_client),
) -> RecipeResponse:
    try:
        service.require_writable_cookbook(cookbook_id, user.id)
        content = await run_in_threadpool(
            extractor.extract_from_url,
            client,
            payload.url,
            timeout=settings.FETCH_TIMEOUT_SECONDS,
            text_limit=settings.PAGE_TEXT_LIMIT,
        )
        recipe = service.create(user.id, cookbook_id, content)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    except ServiceError as exc:
        log.warning("URL extraction failed: url=%s, error=%s", payload.url, exc)
        raise service_http_error(exc) from exc
    return recipe_response(recipe)


@router.post("/image", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def extract_recipe_from_image(
    cookbook_id: str,
    payload: ExtractFromImageRequest,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
    client: GeminiClient = Depends(get_gemini_client),
) -> RecipeResponse:
    try:
        service.require_writable_cookbook(cookbook_id, user.id)
        content = await run_in_threadpool(extractor.extract_from_image, client, payload.imageDataUrl)
        recipe = service.create(user.id, cookbook_id, content)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    except ServiceError as exc:
        log.warning("Image extraction failed: cookbook=%s, error=%s", cookbook_id, exc)
        raise service_http_error(exc) from exc
    return recipe_response(recipe)
