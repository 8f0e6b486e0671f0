"""
Centralized configuration with environment variable overrides.

Booking policy windows, storage location, and the simulated API latency
are configurable here. Nothing is hardcoded in engine or storage logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from office_hours.logging_context import SessionIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "json")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class PolicyConfig:
    """Booking and cancellation timing rules."""

    booking_window_hours: float = _safe_float("BOOKING_WINDOW_HOURS", "1")
    cancellation_window_hours: float = _safe_float("CANCELLATION_WINDOW_HOURS", "24")
    max_notes_length: int = _safe_int("MAX_NOTES_LENGTH", "500")
    max_seats_limit: int = _safe_int("MAX_SEATS_LIMIT", "50")


@dataclass(frozen=True)
class StorageConfig:
    """Where collections are persisted."""

    backend: str = os.getenv("STORAGE_BACKEND", "memory")
    data_path: str = os.getenv("STORAGE_PATH", "office_hours_data.json")
    key_prefix: str = os.getenv("STORAGE_KEY_PREFIX", "uas_")


@dataclass(frozen=True)
class ApiConfig:
    """Artificial latency applied by the async API facade."""

    network_delay_min_ms: int = _safe_int("NETWORK_DELAY_MIN_MS", "300")
    network_delay_max_ms: int = _safe_int("NETWORK_DELAY_MAX_MS", "700")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    policy: PolicyConfig = field(default_factory=PolicyConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.policy.booking_window_hours < 0:
        raise ValueError(
            f"BOOKING_WINDOW_HOURS must be >= 0, got {config.policy.booking_window_hours}"
        )
    if config.policy.cancellation_window_hours < 0:
        raise ValueError(
            "CANCELLATION_WINDOW_HOURS must be >= 0, "
            f"got {config.policy.cancellation_window_hours}"
        )
    if config.policy.max_notes_length < 0:
        raise ValueError(
            f"MAX_NOTES_LENGTH must be >= 0, got {config.policy.max_notes_length}"
        )
    if config.policy.max_seats_limit < 1:
        raise ValueError(
            f"MAX_SEATS_LIMIT must be >= 1, got {config.policy.max_seats_limit}"
        )
    if config.storage.backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got {config.storage.backend!r}"
        )
    if config.api.network_delay_min_ms < 0:
        raise ValueError(
            f"NETWORK_DELAY_MIN_MS must be >= 0, got {config.api.network_delay_min_ms}"
        )
    if config.api.network_delay_min_ms > config.api.network_delay_max_ms:
        raise ValueError(
            "NETWORK_DELAY_MIN_MS must not exceed NETWORK_DELAY_MAX_MS, "
            f"got {config.api.network_delay_min_ms} > {config.api.network_delay_max_ms}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Every record reaching a root handler carries session_id.
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
    logger.info("Configuration loaded (storage backend: %s)", config.storage.backend)
    return config


# Singleton instance
settings = load_config()
