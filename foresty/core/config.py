"""
Configuration module - loads all env vars using pydantic-settings.
Every other module reads its settings through get_settings().
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Hosted backend (auth + tables + rpc)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""
    # When set, access tokens are signature-checked before their claims are trusted
    supabase_jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"
    request_timeout: float = 10.0

    # Session cookie
    session_secret_key: str = "change-this-secret"
    session_cookie: str = "foresty_session"
    session_max_age: int = 60 * 60 * 24 * 14
    # Refresh the access token this many seconds before it expires
    token_refresh_margin: int = 60

    # Role resolution
    role_email_fallback: bool = True

    # Job applications
    resume_max_size_mb: int = 10

    # App
    app_name: str = "Foresty - فرصتي"
    debug: bool = True
    log_level: str = "INFO"

    @property
    def auth_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
