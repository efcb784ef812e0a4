from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from readme_music.errors import ConfigurationError


DEFAULT_BRANCH = "main"
DEFAULT_README_PATH = "README.md"
DEFAULT_PLACEHOLDER = "%music%"
DEFAULT_CACHE_FILE = ".cache/music.json"
DEFAULT_USER_AGENT = "april-ivy"

DEFAULT_UPDATE_INTERVAL_MS = 30_000
MIN_UPDATE_INTERVAL_MS = 5_000
DEFAULT_CACHE_TTL_MS = 10 * 60 * 1000
MIN_CACHE_TTL_MS = 60_000


def _to_number(value: Any, fallback: int, floor: int) -> int:
    if value is None or value == "":
        parsed = fallback
    else:
        try:
            parsed = int(float(value))
        except (TypeError, ValueError, OverflowError):
            parsed = fallback
    return max(floor, parsed)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    lastfm_api_key: str = Field(validation_alias="LASTFM_API_KEY")
    lastfm_username: str = Field(validation_alias="LASTFM_USERNAME")
    github_token: str = Field(validation_alias="GITHUB_TOKEN")
    github_owner: str = Field(validation_alias="GITHUB_OWNER")
    github_repo: str = Field(validation_alias="GITHUB_REPO")

    github_branch: str = Field(default=DEFAULT_BRANCH, validation_alias="GITHUB_BRANCH")
    readme_path: str = Field(default=DEFAULT_README_PATH, validation_alias="README_PATH")
    placeholder: str = Field(default=DEFAULT_PLACEHOLDER, validation_alias="MUSIC_PLACEHOLDER")
    cache_file: Path = Field(
        default=Path(DEFAULT_CACHE_FILE),
        validation_alias="MUSIC_CACHE_FILE",
        validate_default=True,
    )
    update_interval_ms: int = Field(
        default=DEFAULT_UPDATE_INTERVAL_MS, validation_alias="UPDATE_INTERVAL_MS"
    )
    cache_ttl_ms: int = Field(default=DEFAULT_CACHE_TTL_MS, validation_alias="CACHE_TTL_MS")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, validation_alias="APP_USER_AGENT")

    lastfm_base_url: str = Field(
        default="https://ws.audioscrobbler.com/2.0/", validation_alias="LASTFM_BASE_URL"
    )
    github_api_url: str = Field(
        default="https://api.github.com", validation_alias="GITHUB_API_URL"
    )
    http_timeout_seconds: float | None = Field(
        default=None, validation_alias="HTTP_TIMEOUT_SECONDS"
    )

    @field_validator(
        "lastfm_api_key",
        "lastfm_username",
        "github_token",
        "github_owner",
        "github_repo",
    )
    @classmethod
    def _require_value(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("github_branch", mode="before")
    @classmethod
    def _default_branch(cls, value: Any) -> Any:
        return value or DEFAULT_BRANCH

    @field_validator("readme_path", mode="before")
    @classmethod
    def _default_readme_path(cls, value: Any) -> Any:
        return value or DEFAULT_README_PATH

    @field_validator("placeholder", mode="before")
    @classmethod
    def _default_placeholder(cls, value: Any) -> Any:
        return value or DEFAULT_PLACEHOLDER

    @field_validator("user_agent", mode="before")
    @classmethod
    def _default_user_agent(cls, value: Any) -> Any:
        return value or DEFAULT_USER_AGENT

    @field_validator("cache_file", mode="before")
    @classmethod
    def _resolve_cache_file(cls, value: Any) -> Path:
        return Path(value or DEFAULT_CACHE_FILE).resolve()

    @field_validator("update_interval_ms", mode="before")
    @classmethod
    def _clamp_interval(cls, value: Any) -> int:
        return _to_number(value, DEFAULT_UPDATE_INTERVAL_MS, MIN_UPDATE_INTERVAL_MS)

    @field_validator("cache_ttl_ms", mode="before")
    @classmethod
    def _clamp_ttl(cls, value: Any) -> int:
        return _to_number(value, DEFAULT_CACHE_TTL_MS, MIN_CACHE_TTL_MS)

    @field_validator("http_timeout_seconds", mode="before")
    @classmethod
    def _empty_timeout(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @property
    def update_interval_seconds(self) -> float:
        return self.update_interval_ms / 1000

    @property
    def cache_ttl(self) -> datetime.timedelta:
        return datetime.timedelta(milliseconds=self.cache_ttl_ms)


def load_settings(env_file: str | Path | None = None, **overrides: Any) -> Settings:
    """Build the process configuration once; a missing required value is fatal."""
    kwargs: dict[str, Any] = dict(overrides)
    if env_file is not None:
        kwargs["_env_file"] = env_file
    try:
        return Settings(**kwargs)
    except ValidationError as exc:
        missing = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        raise ConfigurationError(missing) from exc
