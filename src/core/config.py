"""Core configuration.

- Centralizes environment variables (pydantic-settings) outside the CLI.
- Adapters (hosted model, geocoding) read their timeouts and endpoints from
  the same `AppSettings` contract.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.language import Language


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "artvaani"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "artvaani"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "artvaani"
    return Path.home() / ".config" / "artvaani"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# ArtVaani user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Values come from `ARTVAANI_`-prefixed environment variables first, then
    the user `.env`, then the project `.env` (the later `env_file` entry
    wins over the earlier one).
    """

    model_config = SettingsConfigDict(
        env_prefix="ARTVAANI_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    ai_api_key: str | None = Field(
        default=None,
        description="API key for the OpenAI-compatible model endpoint.",
    )
    ai_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        min_length=8,
        description="Base URL of the OpenAI-compatible endpoint.",
    )
    ai_model: str = Field(
        default="gemini-2.0-flash",
        min_length=1,
        description="Multimodal model used by every flow.",
    )
    ai_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout per model call (seconds).",
    )
    ai_temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for generated content.",
    )
    ai_max_tokens: int = Field(
        default=2048,
        ge=64,
        le=32_768,
        description="Upper bound on generated tokens per call.",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per geocoding request (seconds).",
    )
    user_agent: str = Field(
        default="ArtVaani-Verification/1.0",
        min_length=1,
        description="User-Agent sent to the geocoding service.",
    )
    geocoding_url: str = Field(
        default="https://nominatim.openstreetmap.org/reverse",
        min_length=8,
        description="Reverse-geocoding endpoint (Nominatim compatible).",
    )

    default_language: Language = Field(
        default=Language.ENGLISH,
        description="Default language for generated content.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level (DEBUG, INFO, WARNING...).",
    )

    @field_validator("default_language", mode="before")
    @classmethod
    def _resolve_language_tag(cls, value: object) -> object:
        if isinstance(value, str) and not isinstance(value, Language):
            return Language.from_tag(value) or value
        return value
