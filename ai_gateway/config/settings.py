"""Process-wide settings read from the environment."""

import logging
import os
from typing import Callable, TypeVar

from pydantic import BaseModel

from .constants import (
    CACHE_MAX_AGE_ENV_VAR,
    CACHE_MAX_SIZE_ENV_VAR,
    DEFAULT_CACHE_MAX_AGE_SECONDS,
    DEFAULT_CACHE_MAX_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_MS,
    MAX_RETRIES_ENV_VAR,
    TIMEOUT_ENV_VAR,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _env_value(name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using default {default}")
        return default


class GatewaySettings(BaseModel):
    """Defaults applied to provider configs and the provider cache."""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    cache_max_size: int = DEFAULT_CACHE_MAX_SIZE
    cache_max_age_seconds: float = DEFAULT_CACHE_MAX_AGE_SECONDS

    @classmethod
    def from_env(cls) -> "GatewaySettings":
        return cls(
            timeout_ms=_env_value(TIMEOUT_ENV_VAR, DEFAULT_TIMEOUT_MS, int),
            max_retries=_env_value(MAX_RETRIES_ENV_VAR, DEFAULT_MAX_RETRIES, int),
            cache_max_size=_env_value(CACHE_MAX_SIZE_ENV_VAR, DEFAULT_CACHE_MAX_SIZE, int),
            cache_max_age_seconds=_env_value(CACHE_MAX_AGE_ENV_VAR, DEFAULT_CACHE_MAX_AGE_SECONDS, float),
        )
