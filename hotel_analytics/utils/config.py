"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    api_host: str
    api_port: int

    session_ttl_seconds: int
    session_sweep_interval_seconds: int
    max_recent_queries: int

    default_forecast_lead_days: int
    max_forecast_days: int
    trend_default_period: str
    price_model_version: str

    synthetic_random_seed: int
    synthetic_seed_days: int
    interaction_history_limit: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call ``cache_clear`` to reload."""
    return Settings(
        app_name=_env_str("APP_NAME", "Hotel Analytics Assistant"),
        app_version=_env_str("APP_VERSION", "1.0.0"),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        database_path=Path(_env_str("DATABASE_PATH", "data/hotel_analytics.db")),
        api_host=_env_str("API_HOST", "127.0.0.1"),
        api_port=_env_int("API_PORT", 8000),
        session_ttl_seconds=_env_int("SESSION_TTL_SECONDS", 1800),
        session_sweep_interval_seconds=_env_int("SESSION_SWEEP_INTERVAL_SECONDS", 60),
        max_recent_queries=_env_int("MAX_RECENT_QUERIES", 5),
        default_forecast_lead_days=_env_int("DEFAULT_FORECAST_LEAD_DAYS", 7),
        max_forecast_days=_env_int("MAX_FORECAST_DAYS", 90),
        trend_default_period=_env_str("TREND_DEFAULT_PERIOD", "next30days"),
        price_model_version=_env_str("PRICE_MODEL_VERSION", "v2.0"),
        synthetic_random_seed=_env_int("SYNTHETIC_RANDOM_SEED", 42),
        synthetic_seed_days=_env_int("SYNTHETIC_SEED_DAYS", 180),
        interaction_history_limit=_env_int("INTERACTION_HISTORY_LIMIT", 50),
    )
