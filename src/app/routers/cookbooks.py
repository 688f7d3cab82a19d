# src/app/routers/cookbooks.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.app.deps import (
    CurrentUser,
    get_cookbook_service,
    get_current_user,
    get_optional_user,
)
from src.app.domain.errors import CookbookError
from src.app.routers.errors import domain_http_error
from src.app.schemas.cookbooks import (
    CookbookCopyRequest,
    CookbookCopyResponse,
    CookbookCreate,
    CookbookResponse,
    CookbookUpdate,
    cookbook_response,
)
from src.app.services.cookbook_service import CookbookService

router = APIRouter(prefix="/cookbooks", tags=["cookbooks"])


@router.get("/", response_model=list[CookbookResponse])
async def list_cookbooks(
    user: CurrentUser | None = Depends(get_optional_user),
    service: CookbookService = Depends(get_cookbook_service),
) -> list[CookbookResponse]:
    caller_id = user.id if user else None
    try:
        cookbooks = service.list_for_user(caller_id)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return [cookbook_response(cookbook) for cookbook in cookbooks]


@router.post("/", response_model=CookbookResponse, status_code=status.HTTP_201_CREATED)
async def create_cookbook(
    payload: CookbookCreate,
    user: CurrentUser = Depends(get_current_user),
    service: CookbookService = Depends(get_cookbook_service),
) -> CookbookResponse:
    try:
        cookbook = service.create(user.id, payload.name, payload.description)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return cookbook_response(cookbook)


@router.get("/{cookbook_id}", response_model=CookbookResponse)
async def get_cookbook(
    cookbook_id: str,
    user: CurrentUser | None = Depends(get_optional_user),
    service: CookbookService = Depends(get_cookbook_service),
) -> CookbookResponse:
    caller_id = user.id if user else None
    try:
        cookbook = service.get(cookbook_id, caller_id)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    if cookbook is None:
        raise HTTPException(status_code=404, detail="Cookbook not found")
    return cookbook_response(cookbook)


@router.patch("/{cookbook_id}", response_model=CookbookResponse)
async def update_cookbook(
    cookbook_id: str,
    payload: CookbookUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: CookbookService = Depends(get_cookbook_service),
) -> CookbookResponse:
    try:
        cookbook = service.update(
            cookbook_id,
            user.id,
            name=payload.name,
            description=payload.description,
            is_public=payload.isPublic,
        )
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return cookbook_response(cookbook)


@router.delete("/{cookbook_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cookbook(
    cookbook_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: CookbookService = Depends(get_cookbook_service),
) -> Response:
    try:
        service.remove(cookbook_id, user.id)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{cookbook_id}/copy",
    response_model=CookbookCopyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def copy_cookbook(
    cookbook_id: str,
    payload: CookbookCopyRequest,
    user: CurrentUser = Depends(get_current_user),
    service: CookbookService = Depends(get_cookbook_service),
) -> CookbookCopyResponse:
    try:
        new_id = service.copy(cookbook_id, user.id, payload.newName)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return CookbookCopyResponse(cookbookId=new_id)
