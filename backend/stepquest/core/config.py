"""
Process-wide settings read from environment variables.
Tuning values default to the pedometer constants; bad values fall back to the default.
"""
import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from stepquest.infrastructure.pedometer.constants import (
    ALPHA,
    DEFAULT_CONSECUTIVE_TARGET,
    STEP_INTERVAL_MS,
    THRESHOLD,
    TRANSITION_DELAY_MS,
    VERTICAL_WEIGHT,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "STEPQUEST_"


@dataclass(frozen=True)
class Settings:
    """Pedometer tuning plus infrastructure settings."""

    threshold: float = THRESHOLD
    step_interval_ms: int = STEP_INTERVAL_MS
    alpha: float = ALPHA
    vertical_weight: float = VERTICAL_WEIGHT
    transition_delay_ms: int = TRANSITION_DELAY_MS
    consecutive_target: int = DEFAULT_CONSECUTIVE_TARGET
    database_url: str = "sqlite:///./stepquest.db"
    log_level: str = "INFO"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("invalid %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(ENV_PREFIX + name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("invalid %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default
    if value < 0:
        logger.warning("negative %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default
    return value


def load_settings() -> Settings:
    """Build Settings from the current environment (uncached)."""
    alpha = _env_float("ALPHA", ALPHA)
    if not 0.0 < alpha < 1.0:
        logger.warning("%sALPHA must be in (0, 1), got %s; using %s", ENV_PREFIX, alpha, ALPHA)
        alpha = ALPHA
    return Settings(
        threshold=_env_float("THRESHOLD", THRESHOLD),
        step_interval_ms=_env_int("STEP_INTERVAL_MS", STEP_INTERVAL_MS),
        alpha=alpha,
        vertical_weight=_env_float("VERTICAL_WEIGHT", VERTICAL_WEIGHT),
        transition_delay_ms=_env_int("TRANSITION_DELAY_MS", TRANSITION_DELAY_MS),
        consecutive_target=_env_int("CONSECUTIVE_TARGET", DEFAULT_CONSECUTIVE_TARGET),
        database_url=os.getenv(ENV_PREFIX + "DATABASE_URL", "") or Settings.database_url,
        log_level=(os.getenv(ENV_PREFIX + "LOG_LEVEL", "") or Settings.log_level).upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cached for the process; tests call get_settings.cache_clear()
    return load_settings()
