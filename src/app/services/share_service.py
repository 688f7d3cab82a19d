# src/app/services/share_service.py
"""
Share link service.
Issues invite links for cookbooks and enforces their expiry and usage limits.
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

from src.app.domain.access import is_owner, require_caller, require_cookbook_owner
from src.app.domain.errors import (
    InvalidOrExpiredTokenError,
    NotFoundError,
    RepositoryError,
)
from src.app.domain.models import IssuedToken, SharedCookbook, ShareToken, display_name
from src.app.domain.validation import optional_int_at_least, require_text
from src.app.infra.db.base import (
    CookbookRepository,
    ProfileRepository,
    RecipeRepository,
    ShareTokenRepository,
)
from src.app.services.cookbook_copy import CookbookDuplicationEngine

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_BYTES = 24
MAX_TOKEN_ATTEMPTS = 5


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class ShareTokenService:
    """
    Service for cookbook share links.

    Responsibilities:
    - Issue links with optional expiry and usage limit
    - Resolve a link into a preview of the shared cookbook
    - Redeem a link, alone or together with the copy it grants

    Every read of a link goes through _find_live, so resolution and
    redemption always agree on whether a link is still usable.
    """

    def __init__(
        self,
        shares: ShareTokenRepository,
        cookbooks: CookbookRepository,
        recipes: RecipeRepository,
        profiles: ProfileRepository,
        copier: CookbookDuplicationEngine,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._shares = shares
        self._cookbooks = cookbooks
        self._recipes = recipes
        self._profiles = profiles
        self._copier = copier
        self._token_bytes = token_bytes
        self._clock = clock or _now_utc

    def issue_token(
        self,
        cookbook_id: str,
        caller_id: Optional[str],
        max_usages: Optional[int] = None,
        expires_in_days: Optional[int] = None,
    ) -> IssuedToken:
        """
        Create a share link for a cookbook the caller owns.

        Args:
            cookbook_id: The cookbook to share
            caller_id: The authenticated user
            max_usages: Number of redemptions allowed, unlimited if None
            expires_in_days: Lifetime in days, never expires if None

        Returns:
            IssuedToken with the record id and the token string

        Raises:
            UnauthenticatedError: If there is no caller
            UnauthorizedError: If the caller does not own the cookbook
            ValidationFailureError: If max_usages < 1 or expires_in_days < 0
        """
        caller = require_caller(caller_id)
        require_cookbook_owner(self._cookbooks.get(cookbook_id), caller)
        max_usages = optional_int_at_least("maxUsages", max_usages, 1)
        expires_in_days = optional_int_at_least("expiresInDays", expires_in_days, 0)

        now = self._clock()
        expires_at = now + timedelta(days=expires_in_days) if expires_in_days is not None else None
        share = ShareToken(
            id=str(uuid4()),
            cookbook_id=cookbook_id,
            token=self._generate_unique_token(),
            created_by=caller,
            usage_count=0,
            max_usages=max_usages,
            expires_at=expires_at,
            created_at=now,
        )
        stored = self._shares.insert(share)

        logger.info(
            "Share link issued: id=%s, cookbook=%s, max_usages=%s, expires_at=%s",
            stored.id, cookbook_id, max_usages, expires_at,
        )
        return IssuedToken(token_id=stored.id, token=stored.token)

    def resolve_token(self, token: str, now: Optional[datetime] = None) -> Optional[SharedCookbook]:
        """
        Preview of the cookbook behind a live link.

        Returns None for unknown, expired and exhausted links alike.
        """
        share = self._find_live(token, now or self._clock())
        if share is None:
            return None

        cookbook = self._cookbooks.get(share.cookbook_id)
        if cookbook is None:
            return None

        return SharedCookbook(
            cookbook=cookbook,
            owner_name=display_name(self._profiles.get(cookbook.owner_id)),
            share=share,
            recipe_count=len(self._recipes.list_by_cookbook(cookbook.id)),
        )

    def redeem_token(self, token: str, caller_id: Optional[str], now: Optional[datetime] = None) -> str:
        """
        Consume one use of a link without copying anything.

        The copy is left to the caller, so a failed copy afterwards still
        costs one use. redeem_and_copy does not have that gap.

        Returns:
            Id of the shared cookbook

        Raises:
            UnauthenticatedError: If there is no caller
            InvalidOrExpiredTokenError: If the link is dead
        """
        require_caller(caller_id)
        now = now or self._clock()
        share = self._find_live(token, now)
        if share is None:
            raise InvalidOrExpiredTokenError()

        if self._shares.increment_usage(share.id, now) is None:
            raise InvalidOrExpiredTokenError()

        logger.info("Share link redeemed: id=%s, cookbook=%s", share.id, share.cookbook_id)
        return share.cookbook_id

    def redeem_and_copy(
        self,
        token: str,
        caller_id: Optional[str],
        new_name: str,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Copy the shared cookbook into the caller's account and consume one use.

        The copy is written first and the use is counted afterwards with a
        conditional increment. If the link died in between, the copy is
        deleted again, so a use is never spent without a cookbook and a
        cookbook is never produced without a use.

        Returns:
            Id of the new cookbook

        Raises:
            UnauthenticatedError: If there is no caller
            ValidationFailureError: If new_name is blank
            InvalidOrExpiredTokenError: If the link is dead
            CopyFailedError: If the copy could not be written
        """
        caller = require_caller(caller_id)
        name = require_text("name", new_name)
        now = now or self._clock()

        share = self._find_live(token, now)
        if share is None:
            raise InvalidOrExpiredTokenError()

        try:
            new_cookbook_id = self._copier.copy(share.cookbook_id, caller, name)
        except NotFoundError as error:
            raise InvalidOrExpiredTokenError() from error

        try:
            consumed = self._shares.increment_usage(share.id, now)
        except RepositoryError as error:
            logger.error(
                "Counting share use failed, discarding copy: share=%s, copy=%s, error=%s",
                share.id, new_cookbook_id, error,
            )
            self._discard_copy(new_cookbook_id)
            raise

        if consumed is None:
            logger.warning(
                "Share link died during copy, discarding: share=%s, copy=%s",
                share.id, new_cookbook_id,
            )
            self._discard_copy(new_cookbook_id)
            raise InvalidOrExpiredTokenError()

        logger.info(
            "Share link redeemed with copy: id=%s, usage=%d, copy=%s",
            share.id, consumed.usage_count, new_cookbook_id,
        )
        return new_cookbook_id

    def list_for_cookbook(self, cookbook_id: str, caller_id: Optional[str]) -> list[ShareToken]:
        """All links of a cookbook; empty unless the caller owns it."""
        cookbook = self._cookbooks.get(cookbook_id)
        if cookbook is None or not is_owner(cookbook.owner_id, caller_id):
            return []
        return self._shares.list_by_cookbook(cookbook_id)

    def _discard_copy(self, cookbook_id: str) -> None:
        try:
            self._copier.discard(cookbook_id)
        except RepositoryError as error:
            logger.exception("Discarding cookbook copy failed: id=%s, error=%s", cookbook_id, error)

    def _find_live(self, token: str, now: datetime) -> Optional[ShareToken]:
        if not token:
            return None
        share = self._shares.get_by_token(token)
        if share is None or not share.is_alive(now):
            return None
        return share

    def _generate_unique_token(self) -> str:
        for _ in range(MAX_TOKEN_ATTEMPTS):
            candidate = secrets.token_urlsafe(self._token_bytes)
            if self._shares.get_by_token(candidate) is None:
                return candidate
            logger.warning("Share token collision, regenerating")
        raise RepositoryError("issue_share", "could not generate a unique token")
