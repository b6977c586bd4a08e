"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


ENV_PREFIX = "HOUSING_"
PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env(name: str, default: str) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    default_priority_mode: str
    deterministic_tie_break: bool
    tie_break_epsilon: float
    house_config_path: Path
    people_config_path: Path
    max_people: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call ``cache_clear`` to reload."""
    return Settings(
        app_name=_env("APP_NAME", "House Room Allocator"),
        app_version=_env("APP_VERSION", "0.3.0"),
        log_level=_env("LOG_LEVEL", "INFO"),
        default_priority_mode=_env("PRIORITY_MODE", "amplify"),
        deterministic_tie_break=_env_bool("DETERMINISTIC_TIE_BREAK", True),
        tie_break_epsilon=float(_env("TIE_BREAK_EPSILON", "1e-9")),
        house_config_path=Path(
            _env("HOUSE_CONFIG", str(PROJECT_ROOT / "data" / "sample_house.json"))
        ),
        people_config_path=Path(
            _env("PEOPLE_CONFIG", str(PROJECT_ROOT / "data" / "sample_people.json"))
        ),
        max_people=int(_env("MAX_PEOPLE", "200")),
    )
