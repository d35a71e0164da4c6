"""Application configuration module.

Reads settings from environment variables (and an optional ``.env`` file).
The resulting config is frozen: whether remote sync is available is decided
once at process start and never changes afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from core.exceptions import ConfigurationError

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Get integer from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(name, default)


@dataclass(frozen=True)
class Config:
    api_url: str
    api_key: str
    request_timeout_ms: int
    retry_after_seconds: int
    poll_interval_ms: int
    offline_poll_interval_ms: int
    database_path: str
    db_pool_size: int
    db_busy_timeout: int
    log_folder: str
    log_level: str
    environment: str
    debug: bool

    @property
    def sync_enabled(self) -> bool:
        """Remote sync is possible only when a backend URL is configured."""
        return bool(self.api_url.strip())


def load_config() -> Config:
    """Load application configuration from environment variables.

    Returns:
        Config: Application configuration with validated values

    Raises:
        ConfigurationError: If a timeout or interval is not positive
    """
    config = Config(
        api_url=_get_str("STATS_API_URL", "").strip(),
        api_key=_get_str("STATS_API_KEY", ""),
        request_timeout_ms=_get_int("STATS_REQUEST_TIMEOUT_MS", 5000),
        retry_after_seconds=_get_int("STATS_RETRY_AFTER_SECONDS", 60),
        poll_interval_ms=_get_int("STATS_POLL_INTERVAL_MS", 10000),
        offline_poll_interval_ms=_get_int("STATS_OFFLINE_POLL_INTERVAL_MS", 30000),
        database_path=_get_str("DATABASE_PATH", "data/stats_cache.sqlite"),
        db_pool_size=_get_int("DB_POOL_SIZE", 2),
        db_busy_timeout=_get_int("DB_BUSY_TIMEOUT", 5000),
        log_folder=_get_str("LOG_FOLDER", "logs"),
        log_level=_get_str("LOG_LEVEL", "INFO"),
        environment=_get_str("ENVIRONMENT", "development"),
        debug=_get_bool("DEBUG", False),
    )

    for name in ("request_timeout_ms", "poll_interval_ms", "offline_poll_interval_ms"):
        if getattr(config, name) <= 0:
            raise ConfigurationError(f"{name} must be positive, got {getattr(config, name)}")

    return config
