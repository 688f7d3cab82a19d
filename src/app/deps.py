# src/app/deps.py (shared Supabase client plus service factories for Depends)

from __future__ import annotations
from supabase import create_client, Client
from src.app.config import settings
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from src.app.infra.db.supabase_repo import (
    SupabaseCookbookRepository,
    SupabaseProfileRepository,
    SupabaseRecipeRepository,
    SupabaseShareTokenRepository,
)
from src.app.services.cookbook_copy import CookbookDuplicationEngine
from src.app.services.cookbook_service import CookbookService
from src.app.services.recipe_service import RecipeService
from src.app.services.share_service import ShareTokenService
from src.services.gemini_client import GeminiClient, GeminiConfigurationError

_client: Client | None = None

def get_supabase() -> Client:
    global _client
    if _client is None:
        _client = create_client(str(settings.SUPABASE_URL),
                                settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


auth_scheme = HTTPBearer(auto_error=False)

class CurrentUser(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None


def _resolve_user(supa: Client, token: str) -> CurrentUser:
    try:
        # validate the access token against Supabase Auth
        res = supa.auth.get_user(token)
        user = res.user if res else None
        if not user:
            raise HTTPException(status_code=401, detail="Invalid token")

        # display name lives in user_metadata when set
        name = None
        meta = getattr(user, "user_metadata", None) or {}
        if isinstance(meta, dict):
            name = meta.get("name")

        return CurrentUser(id=str(user.id), email=user.email, name=name)
    except HTTPException:
        raise
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid/expired token")


async def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
    supa: Client = Depends(get_supabase),
) -> CurrentUser:
    """
    Reads Authorization: Bearer <access_token> issued by Supabase,
    validates it and returns the minimal user identity.
    """
    if cred is None or cred.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    return _resolve_user(supa, cred.credentials)


async def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
    supa: Client = Depends(get_supabase),
) -> CurrentUser | None:
    """Same as get_current_user, but anonymous callers get None."""
    if cred is None or cred.scheme.lower() != "bearer":
        return None
    return _resolve_user(supa, cred.credentials)


def get_copier(supa: Client = Depends(get_supabase)) -> CookbookDuplicationEngine:
    return CookbookDuplicationEngine(
        cookbooks=SupabaseCookbookRepository(supa),
        recipes=SupabaseRecipeRepository(supa),
        profiles=SupabaseProfileRepository(supa),
    )


def get_cookbook_service(
    supa: Client = Depends(get_supabase),
    copier: CookbookDuplicationEngine = Depends(get_copier),
) -> CookbookService:
    return CookbookService(
        cookbooks=SupabaseCookbookRepository(supa),
        recipes=SupabaseRecipeRepository(supa),
        shares=SupabaseShareTokenRepository(supa),
        copier=copier,
    )


def get_recipe_service(supa: Client = Depends(get_supabase)) -> RecipeService:
    return RecipeService(
        cookbooks=SupabaseCookbookRepository(supa),
        recipes=SupabaseRecipeRepository(supa),
    )


def get_share_service(
    supa: Client = Depends(get_supabase),
    copier: CookbookDuplicationEngine = Depends(get_copier),
) -> ShareTokenService:
    return ShareTokenService(
        shares=SupabaseShareTokenRepository(supa),
        cookbooks=SupabaseCookbookRepository(supa),
        recipes=SupabaseRecipeRepository(supa),
        profiles=SupabaseProfileRepository(supa),
        copier=copier,
        token_bytes=settings.SHARE_TOKEN_BYTES,
    )


def get_gemini_client() -> GeminiClient:
    try:
        return GeminiClient(
            api_key=settings.GEMINI_API_KEY.get_secret_value(),
            model_name=settings.GEMINI_MODEL,
        )
    except GeminiConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
