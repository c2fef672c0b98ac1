from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_COMMAND_ENV = "SENSORS_COMMAND"
_TIMEOUT_ENV = "SENSORS_TIMEOUT_SECONDS"
_INTERVAL_ENV = "REFRESH_INTERVAL_MS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    sensors_command: str
    command_timeout: float
    refresh_interval: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_interval_seconds(default_ms: int) -> float:
    value = os.getenv(_INTERVAL_ENV)
    if value is None:
        return default_ms / 1000
    candidate = value.strip()
    if not candidate:
        return default_ms / 1000
    try:
        parsed = int(candidate)
    except ValueError:
        return default_ms / 1000
    return (parsed if parsed > 0 else default_ms) / 1000


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        sensors_command=_read_str_env(_COMMAND_ENV, "sensors"),
        command_timeout=_read_positive_float_env(_TIMEOUT_ENV, 5.0),
        refresh_interval=_read_interval_seconds(500),
        log_level=_read_log_level("INFO"),
    )
