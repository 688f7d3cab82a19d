# src/app/routers/shares.py
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from src.app.config import settings
from src.app.deps import CurrentUser, get_current_user, get_optional_user, get_share_service
from src.app.domain.errors import CookbookError, InvalidOrExpiredTokenError
from src.app.routers.errors import domain_http_error
from src.app.schemas.cookbooks import cookbook_response
from src.app.schemas.shares import (
    ShareCreate,
    ShareIssued,
    SharePreview,
    ShareRedeemRequest,
    ShareRedeemResponse,
    ShareResponse,
    share_response,
)
from src.app.services.share_service import ShareTokenService

router = APIRouter(tags=["shares"])


@router.get("/cookbooks/{cookbook_id}/shares", response_model=list[ShareResponse])
async def list_share_links(
    cookbook_id: str,
    user: CurrentUser | None = Depends(get_optional_user),
    service: ShareTokenService = Depends(get_share_service),
) -> list[ShareResponse]:
    caller_id = user.id if user else None
    try:
        shares = service.list_for_cookbook(cookbook_id, caller_id)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    now = datetime.now(timezone.utc)
    return [
        share_response(share, settings.share_url(share.token), share.is_alive(now))
        for share in shares
    ]


@router.post(
    "/cookbooks/{cookbook_id}/shares",
    response_model=ShareIssued,
    status_code=status.HTTP_201_CREATED,
)
async def create_share_link(
    cookbook_id: str,
    payload: ShareCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ShareTokenService = Depends(get_share_service),
) -> ShareIssued:
    try:
        issued = service.issue_token(
            cookbook_id,
            user.id,
            max_usages=payload.maxUsages,
            expires_in_days=payload.expiresInDays,
        )
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return ShareIssued(
        shareId=issued.token_id,
        shareToken=issued.token,
        url=settings.share_url(issued.token),
    )


@router.get("/shares/{token}", response_model=SharePreview)
async def preview_share_link(
    token: str,
    service: ShareTokenService = Depends(get_share_service),
) -> SharePreview:
    try:
        shared = service.resolve_token(token)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    if shared is None:
        raise domain_http_error(InvalidOrExpiredTokenError())
    return SharePreview(
        cookbook=cookbook_response(shared.cookbook),
        ownerName=shared.owner_name,
        recipeCount=shared.recipe_count,
        share=share_response(shared.share, settings.share_url(shared.share.token), True),
    )


@router.post(
    "/shares/{token}/copy",
    response_model=ShareRedeemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def copy_shared_cookbook(
    token: str,
    payload: ShareRedeemRequest,
    user: CurrentUser = Depends(get_current_user),
    service: ShareTokenService = Depends(get_share_service),
) -> ShareRedeemResponse:
    try:
        new_id = service.redeem_and_copy(token, user.id, payload.newName)
    except CookbookError as exc:
        raise domain_http_error(exc) from exc
    return ShareRedeemResponse(cookbookId=new_id)
