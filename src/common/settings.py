"""
Process settings shared by the API, the logging setup, and the schema bootstrap script.

Values come from `.env` (when present) and the process environment. Every model field
without a default is required; all missing names are reported together so a fresh
deployment can be fixed in one pass.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator


class Settings(BaseModel):
    """Typed runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    PROJECT_NAME: str
    ENV: str
    LOG_LEVEL: str
    DATABASE_URL: str

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


def required_env_vars() -> tuple[str, ...]:
    return tuple(name for name, info in Settings.model_fields.items() if info.is_required())


def load_settings(*, load_env: bool = True) -> Settings:
    """Build `Settings` from the environment, raising `RuntimeError` on any gap."""

    if load_env:
        load_dotenv()

    missing = sorted(key for key in required_env_vars() if not os.getenv(key))
    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Set them in the environment or in `.env`."
        )

    try:
        values = {key: os.environ[key] for key in Settings.model_fields if key in os.environ}
        return Settings.model_validate(values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
