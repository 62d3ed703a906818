"""Run configuration using pydantic-settings.

Values come from ``SLIDEXPORT_*`` environment variables or a ``.env`` file;
CLI flags override them.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slidexport.exceptions import ConfigError

PRESENTATIONS_READONLY_SCOPE = "https://www.googleapis.com/auth/presentations.readonly"

ThumbnailSize = Literal["LARGE", "MEDIUM", "SMALL"]

_PRESENTATION_URL_PATTERN = re.compile(r"docs\.google\.com/presentation/d/([a-zA-Z0-9_-]+)")


def parse_presentation_id(id_or_url: str) -> str:
    """Extract presentation ID from a URL or return as-is if already an ID.

    Supports URLs like:
    - https://docs.google.com/presentation/d/PRESENTATION_ID/edit
    - https://docs.google.com/presentation/d/PRESENTATION_ID/edit#slide=id.xxx
    - https://docs.google.com/presentation/d/PRESENTATION_ID/
    """
    match = _PRESENTATION_URL_PATTERN.search(id_or_url)
    if match:
        return match.group(1)
    return id_or_url.strip()


class Settings(BaseSettings):
    """Settings for a single export run."""

    model_config = SettingsConfigDict(
        env_prefix="SLIDEXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    presentation_id: str = ""

    # OAuth client descriptor and cached token
    credentials_file: Path = Path("credentials.json")
    token_file: Path = Path("token.json")
    scopes: list[str] = [PRESENTATIONS_READONLY_SCOPE]

    output_dir: Path = Path()
    thumbnail_size: ThumbnailSize | None = None
    timeout: float = 60.0

    log_level: str = "WARNING"
    json_logs: bool = False

    @field_validator("presentation_id")
    @classmethod
    def _parse_presentation_id(cls, value: str) -> str:
        return parse_presentation_id(value)

    @field_validator("scopes")
    @classmethod
    def _require_scopes(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one OAuth scope is required")
        return value


def load_settings(**overrides: object) -> Settings:
    """Build settings from the environment, applying non-None overrides.

    Raises:
        ConfigError: If the resulting settings are invalid.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        settings = Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
    if not settings.presentation_id:
        raise ConfigError("No presentation ID given")
    return settings
