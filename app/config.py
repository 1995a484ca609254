"""Configuration utilities for the assessment engine service.

This module loads application configuration with the following rules:
- Primary source: `assessment_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("assessment_config.json")
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: an unreadable override falls through to the next source
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        norm = str(v).strip().upper()
        if norm not in LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {sorted(LOG_LEVELS)}")
        return norm


class ApiConfig(BaseModel):
    prefix: str = Field(default="/api/v1")
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("prefix")
    @classmethod
    def prefix_must_be_rooted(cls, v: str) -> str:
        if not v.startswith("/") or v.endswith("/"):
            raise ValueError("api.prefix must start with '/' and not end with '/'")
        return v


class AppConfig(BaseModel):
    logging: LoggingConfig
    api: ApiConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:  # pragma: no cover - defensive
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) assessment_config.json at project root
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(x) for x in cur)
        return str(cur) if cur is not None else default

    level = _env("LOG_LEVEL") or _read_config_file("logging.level") or _base("logging.level", "INFO")
    prefix = _env("API_PREFIX") or _read_config_file("api.prefix") or _base("api.prefix", "/api/v1")
    origins_text = (
        _env("CORS_ALLOW_ORIGINS")
        or _read_config_file("api.cors_allow_origins")
        or _base("api.cors_allow_origins", "*")
    )
    origins = [o.strip() for o in str(origins_text).split(",") if o.strip()]

    try:
        return AppConfig(
            logging=LoggingConfig(level=level),
            api=ApiConfig(prefix=str(prefix).strip(), cors_allow_origins=origins or ["*"]),
        )
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "ApiConfig",
    "AppConfig",
    "LoggingConfig",
    "load_config",
]
