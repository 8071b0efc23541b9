"""
Centralised settings loader.

Provider credentials are optional: a provider whose key is absent is simply
left out of the registry (and of GET /api/ai/providers).
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime ────────────────────────────────────────────────────
    env_name: str = Field("local", validation_alias="ENV_NAME")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    cors_origin: str = Field("*", validation_alias="CORS_ORIGIN")

    # ─── auth (tokens are issued by the hosted BaaS) ────────────────
    jwt_secret: str | None = Field(None, validation_alias="SUPABASE_JWT_SECRET")
    jwt_audience: str = Field("authenticated", validation_alias="JWT_AUDIENCE")

    # ─── provider credentials ───────────────────────────────────────
    gemini_api_key: str | None = Field(None, validation_alias="GEMINI_API_KEY")
    openai_api_key: str | None = Field(None, validation_alias="OPENAI_API_KEY")
    deepseek_api_key: str | None = Field(None, validation_alias="DEEPSEEK_API_KEY")

    # ─── provider models / endpoints ────────────────────────────────
    gemini_model: str = Field("gemini-2.5-flash", validation_alias="GEMINI_MODEL")
    openai_model: str = Field("gpt-4o", validation_alias="OPENAI_MODEL")
    deepseek_model: str = Field("deepseek-chat", validation_alias="DEEPSEEK_MODEL")
    deepseek_base_url: str = Field(
        "https://api.deepseek.com/v1", validation_alias="DEEPSEEK_BASE_URL"
    )

    # upper bound for a single outbound provider call
    provider_timeout_s: float = Field(120.0, validation_alias="PROVIDER_TIMEOUT_S")

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
