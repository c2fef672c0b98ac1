from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_WATCH_INTERVAL = 0.5
DEFAULT_HTTP_TIMEOUT = 10.0

_BASE_URL_ENV = "SENSORY_API_URL"
_WATCH_INTERVAL_ENV = "SENSORY_WATCH_INTERVAL"
_HTTP_TIMEOUT_ENV = "SENSORY_HTTP_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    watch_interval: float = DEFAULT_WATCH_INTERVAL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def _read_float(value: Optional[str], default: float) -> float:
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


def load_config(
    base_url: Optional[str] = None,
    watch_interval: Optional[float] = None,
    http_timeout: Optional[float] = None,
) -> CLIConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if watch_interval is None:
        watch_interval = _read_float(os.getenv(_WATCH_INTERVAL_ENV), DEFAULT_WATCH_INTERVAL)
    if http_timeout is None:
        http_timeout = _read_float(os.getenv(_HTTP_TIMEOUT_ENV), DEFAULT_HTTP_TIMEOUT)
    return CLIConfig(
        base_url=url.rstrip("/"),
        watch_interval=watch_interval,
        http_timeout=http_timeout,
    )
