"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenLibrarySettings(BaseModel):
    search_url: AnyHttpUrl = Field(
        default="https://openlibrary.org/search.json",
        description="Search endpoint queried with a `title` filter.",
    )
    covers_base_url: AnyHttpUrl = Field(default="https://covers.openlibrary.org/b/id")
    placeholder_cover_url: str = "https://via.placeholder.com/150x200?text=No+Cover"
    result_limit: int = Field(default=20, ge=1, le=100)
    user_agent: str = "bookfinder-bot/1.0 (+https://openlibrary.org/developers/api)"


class StorageSettings(BaseModel):
    dsn: str = Field(
        default="sqlite:///bookfinder.db",
        description="SQLAlchemy DSN of the local key/value store.",
    )
    echo: bool = False
    remember_key: str = Field(default="lastQuery", min_length=1)


class RequestLimitSettings(BaseModel):
    max_requests: int = Field(default=5, ge=0)
    interval_seconds: int = Field(default=10, ge=1)


class BotSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOKFINDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    telegram_token: SecretStr
    telegram_proxy: str | None = None
    default_language: str = "en"
    admin_telegram_id: int | None = None

    openlibrary: OpenLibrarySettings = Field(default_factory=OpenLibrarySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    request_limit: RequestLimitSettings = Field(default_factory=RequestLimitSettings)

    @field_validator("telegram_proxy", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache
def get_settings() -> BotSettings:
    """Return cached settings instance."""

    return BotSettings()  # type: ignore[call-arg]


__all__ = [
    "BotSettings",
    "OpenLibrarySettings",
    "RequestLimitSettings",
    "StorageSettings",
    "get_settings",
]
