"""
Centralized configuration with environment variable overrides.

Slot width, booking horizon, cancellation policy, store timeouts and
review paging limits are all configurable here. Nothing is hardcoded in
the scheduling or store logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from lessonbook.logging_context import build_log_handler

load_dotenv()

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


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


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag such as ``true``/``0``/``off`` from an env var."""
    raw = os.getenv(env_var, default)
    normalized = str(raw).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class ScheduleConfig:
    """Slot generation and availability settings."""

    slot_minutes: int = _safe_int("SLOT_MINUTES", "60")
    booking_horizon_days: int = _safe_int("BOOKING_HORIZON_DAYS", "30")
    timezone: str = os.getenv("SCHOOL_TIMEZONE", "America/Bogota")


@dataclass(frozen=True)
class CancellationConfig:
    """Late-cancellation policy."""

    hours_limit: int = _safe_int("CANCELLATION_HOURS_LIMIT", "4")
    allow_after_limit: bool = _safe_bool("CANCELLATION_ALLOW_AFTER_LIMIT", "true")


@dataclass(frozen=True)
class StoreConfig:
    """Booking store access settings."""

    timeout_seconds: float = _safe_float("STORE_TIMEOUT_SECONDS", "2.0")


@dataclass(frozen=True)
class ReviewConfig:
    """Paging limits for the administrative booking review."""

    default_page_size: int = _safe_int("DEFAULT_PAGE_SIZE", "10")
    max_page_size: int = _safe_int("MAX_PAGE_SIZE", "100")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    cancellation: CancellationConfig = field(default_factory=CancellationConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    school_name: str = os.getenv("SCHOOL_NAME", "Autoescuela Central")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 5 <= config.schedule.slot_minutes <= 480:
        raise ValueError(
            f"SLOT_MINUTES must be between 5 and 480, got {config.schedule.slot_minutes}"
        )
    if config.schedule.booking_horizon_days < 0:
        raise ValueError(
            "BOOKING_HORIZON_DAYS must be >= 0, "
            f"got {config.schedule.booking_horizon_days}"
        )
    if config.cancellation.hours_limit < 0:
        raise ValueError(
            f"CANCELLATION_HOURS_LIMIT must be >= 0, got {config.cancellation.hours_limit}"
        )
    if config.store.timeout_seconds <= 0:
        raise ValueError(
            f"STORE_TIMEOUT_SECONDS must be > 0, got {config.store.timeout_seconds}"
        )
    if config.review.default_page_size < 1:
        raise ValueError(
            f"DEFAULT_PAGE_SIZE must be >= 1, got {config.review.default_page_size}"
        )
    if config.review.max_page_size < config.review.default_page_size:
        raise ValueError(
            "MAX_PAGE_SIZE must be >= DEFAULT_PAGE_SIZE, "
            f"got {config.review.max_page_size}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[build_log_handler()],
    )
    logger.info("Configuration loaded for '%s'", config.school_name)
    return config


# Singleton instance
settings = load_config()
