"""Application configuration models."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any, Iterable, Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Conventional locations probed, in order, when no payload is injected.
CONTENT_SOURCES: tuple[str, ...] = (
    "./content.json",
    "./catalog.json",
    "./data.json",
    "./data/content.json",
    "./data/catalog.json",
    "./data/all.json",
    "./data/movies.json",
    "./data/tv.json",
)


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="MovieShows", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    content_root: str = Field(default=".", alias="CONTENT_ROOT")
    content_base_url: HttpUrl | None = Field(default=None, alias="CONTENT_BASE_URL")
    content_sources: Annotated[tuple[str, ...], NoDecode] = Field(
        default=CONTENT_SOURCES, alias="CONTENT_SOURCES"
    )
    injected_content: Any = Field(default=None, alias="MOVIESHOWS_CONTENT")
    source_timeout_seconds: float = Field(
        default=10.0, alias="SOURCE_TIMEOUT", ge=1.0, le=120.0
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./movieshows.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("content_sources", mode="before")
    @classmethod
    def _parse_content_sources(cls, value: object) -> tuple[str, ...]:
        """Normalise source location lists from environment values."""

        if value is None:
            return CONTENT_SOURCES
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError("CONTENT_SOURCES must be a string or iterable of strings")

        cleaned: list[str] = []
        for entry in raw_values:
            if entry and entry not in cleaned:
                cleaned.append(entry)
        if not cleaned:
            return CONTENT_SOURCES
        return tuple(cleaned)

    @field_validator("injected_content", mode="before")
    @classmethod
    def _parse_injected_content(cls, value: object) -> object:
        """Decode an inline JSON payload embedded at build time."""

        if not isinstance(value, str):
            return value
        stripped = value.strip()
        if not stripped:
            return None
        try:
            return json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ValueError("MOVIESHOWS_CONTENT must contain valid JSON") from exc

    @field_validator("content_base_url", mode="before")
    @classmethod
    def _blank_base_url(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
