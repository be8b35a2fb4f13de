"""Configuration for the leaderboard job and API.

Environment variables are loaded from ``config/.env`` first; the challenge list
and auth cookie come from a JSON file (``config.json`` by default).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

load_dotenv(os.path.join(os.path.dirname(__file__), "../config/.env"))

DEFAULT_CONFIG_PATH = "./config.json"
DEFAULT_SNAPSHOT_PATH = "./docs/data.json"
DEFAULT_API_BASE = "https://www.geoguessr.com/api/v3"
DEFAULT_TIMEOUT = 30.0


class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


class LeaderboardConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cookie: str = Field(..., min_length=1)
    challenge_ids: List[str] = Field(..., alias="challengeIds", min_length=1)

    @field_validator("cookie")
    @classmethod
    def _cookie_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("cookie cannot be blank")
        return value

    @field_validator("challenge_ids")
    @classmethod
    def _ids_not_blank(cls, value: List[str]) -> List[str]:
        cleaned = [challenge_id.strip() for challenge_id in value]
        if any(not challenge_id for challenge_id in cleaned):
            raise ValueError("challengeIds cannot contain blank ids")
        return cleaned


def config_path() -> Path:
    return Path(os.getenv("LEADERBOARD_CONFIG", DEFAULT_CONFIG_PATH))


def snapshot_path() -> Path:
    return Path(os.getenv("SNAPSHOT_PATH", DEFAULT_SNAPSHOT_PATH))


def snapshot_url() -> Optional[str]:
    return os.getenv("SNAPSHOT_URL") or None


def api_base() -> str:
    return os.getenv("GEOGUESSR_API_BASE", DEFAULT_API_BASE).rstrip("/")


def request_timeout() -> float:
    raw = os.getenv("REQUEST_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigError(f"REQUEST_TIMEOUT must be a number, got {raw!r}") from exc
    if timeout <= 0:
        raise ConfigError("REQUEST_TIMEOUT must be positive")
    return timeout


def load_config(path: Optional[Path] = None) -> LeaderboardConfig:
    """Read and validate the JSON config; ``GEOGUESSR_COOKIE`` overrides the file's cookie."""
    path = path or config_path()
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"{path} not found") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a JSON object")

    cookie_override = os.getenv("GEOGUESSR_COOKIE")
    if cookie_override:
        raw["cookie"] = cookie_override

    try:
        return LeaderboardConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid {path}. Ensure 'cookie' and 'challengeIds' are set. ({exc.error_count()} errors)"
        ) from exc
