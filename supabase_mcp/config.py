"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import StringConstraints, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

# Secrets the server refuses to start without.
REQUIRED_SECRETS = ("SUPABASE_URL", "SUPABASE_KEY", "SUPABASE_ACCESS_TOKEN")

# Blank values count as unset
Secret = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# Validation error types that mean "not configured"
_UNSET_ERRORS = {"missing", "string_too_short"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase project (data, storage, functions, auth admin)
    supabase_url: Secret
    supabase_key: Secret

    # Management API (projects, organizations, API keys)
    supabase_access_token: Secret
    management_api_url: str = "https://api.supabase.com/v1"

    # Approval gate
    require_approval: bool = False
    # None waits for a decision indefinitely
    approval_timeout_seconds: float | None = None

    # Transport
    host: str = "127.0.0.1"
    port: int = 8765
    connect_timeout_seconds: float = 30.0

    http_timeout_seconds: float = 30.0
    log_level: str = "info"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def missing_secrets(error: ValidationError) -> list[str]:
    """Return the env var names of required secrets a ValidationError complains about."""
    missing = []
    for item in error.errors():
        if item.get("type") not in _UNSET_ERRORS or not item.get("loc"):
            continue
        name = str(item["loc"][0]).upper()
        if name in REQUIRED_SECRETS:
            missing.append(name)
    return missing


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        pydantic.ValidationError: If a required secret is not configured.
    """
    return Settings()
