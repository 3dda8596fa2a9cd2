from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .constraint import DEFAULT_CONFIG_PATH, ENV_PREFIX


@dataclass(frozen=True, slots=True)
class Settings:
    """Application runtime settings sourced from environment variables."""

    config_path: Path = DEFAULT_CONFIG_PATH
    max_file_size_mb: int | None = None
    allowed_origins: tuple[str, ...] | None = None


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_origins(value: str | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    origins = tuple(item.strip() for item in value.split(",") if item.strip())
    return origins or None


def _read_settings() -> Settings:
    config_env = os.getenv(f"{ENV_PREFIX}CONFIG_PATH")
    config_path = Path(config_env) if config_env else DEFAULT_CONFIG_PATH
    return Settings(
        config_path=config_path,
        max_file_size_mb=_parse_int(os.getenv(f"{ENV_PREFIX}MAX_FILE_SIZE_MB")),
        allowed_origins=_parse_origins(os.getenv(f"{ENV_PREFIX}ALLOWED_ORIGINS")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return _read_settings()


__all__ = ["Settings", "get_settings"]
