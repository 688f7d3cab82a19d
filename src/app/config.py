from __future__ import annotations

from pydantic import AnyUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: AnyUrl
    SUPABASE_SERVICE_ROLE_KEY: str
    GEMINI_API_KEY: SecretStr = SecretStr("")
    GEMINI_MODEL: str = "gemini-2.5-flash"
    APP_ENV: str = "local"
    PUBLIC_APP_URL: str = "http://localhost:3000"
    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"],
    )
    SHARE_TOKEN_BYTES: int = Field(default=24, ge=16)
    PAGE_TEXT_LIMIT: int = Field(default=10_000, ge=1)
    FETCH_TIMEOUT_SECONDS: float = Field(default=15.0, gt=0)

    def share_url(self, token: str) -> str:
        return f"{self.PUBLIC_APP_URL.rstrip('/')}/share/{token}"


settings = Settings()
