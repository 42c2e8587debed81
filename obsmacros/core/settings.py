"""Runtime settings taken from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_REQUEST_TIMEOUT_S = 10.0
LOGGER = logging.getLogger(__name__)


def _getenv_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        value = float(v)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r", name, v)
        return default
    if value <= 0:
        LOGGER.warning("Ignoring non-positive %s=%r", name, v)
        return default
    return value


@dataclass(frozen=True)
class Settings:
    config_path: str
    log_level: str
    request_timeout_s: float

    @staticmethod
    def load() -> "Settings":
        config_path = (os.getenv("OBSMACROS_CONFIG") or "").strip() or DEFAULT_CONFIG_FILE
        log_level = (os.getenv("OBSMACROS_LOG_LEVEL") or "").strip().upper() or "WARNING"
        request_timeout_s = _getenv_float("OBSMACROS_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT_S)
        return Settings(
            config_path=config_path,
            log_level=log_level,
            request_timeout_s=request_timeout_s,
        )
