# src/app/routers/recipes.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.app.deps import CurrentUser, get_current_user, get_optional_user, get_recipe_service
from src.app.domain.errors import CookbookError
from src.app.routers.errors import domain_http_error
from src.app.schemas.recipes import RecipeCreate, RecipeResponse, RecipeUpdate, recipe_response
from src.app.services.recipe_service import RecipeService

router = APIRouter(tags=["recipes"])


@router.get("/cookbooks/{cookbook_id}/recipes", response_model=list[RecipeResponse])
async def list_recipes(
    cookbook_id: str,
    user: CurrentUser | None = Depends(get_optional_user),
    service: RecipeService = Depends(get_recipe_service),
) -> list[RecipeResponse]:
    caller_id = user.id if user else None
    try:
        recipes = service.list_for_cookbook(cookbook_id, caller_id)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return [recipe_response(recipe) for recipe in recipes]


@router.post(
    "/cookbooks/{cookbook_id}/recipes",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_recipe(
    cookbook_id: str,
    payload: RecipeCreate,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    try:
        recipe = service.create(user.id, cookbook_id, payload.to_content())
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return recipe_response(recipe)


@router.get("/recipes/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: str,
    user: CurrentUser | None = Depends(get_optional_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    caller_id = user.id if user else None
    try:
        recipe = service.get(recipe_id, caller_id)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe_response(recipe)


@router.patch("/recipes/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: str,
    payload: RecipeUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    try:
        recipe = service.update(recipe_id, user.id, payload.to_changes())
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return recipe_response(recipe)


@router.delete("/recipes/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> Response:
    try:
        service.remove(recipe_id, user.id)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
