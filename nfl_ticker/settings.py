from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_INTERVAL_SECONDS = 60 * 60
DEFAULT_UPDATE_INTERVAL_LIVE_SECONDS = 60
DEFAULT_REQUEST_TIMEOUT_SECONDS = 12.0


@dataclass(frozen=True)
class PollerConfig:
    update_interval: float = DEFAULT_UPDATE_INTERVAL_SECONDS
    update_interval_live: float = DEFAULT_UPDATE_INTERVAL_LIVE_SECONDS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        for field_name in ("update_interval", "update_interval_live", "request_timeout"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"{field_name} must be a positive number of seconds, got {value!r}")
        if self.update_interval_live > self.update_interval:
            logger.warning(
                "update_interval_live=%ss is longer than update_interval=%ss",
                self.update_interval_live,
                self.update_interval,
            )


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_settings() -> PollerConfig:
    """Build the poller configuration from environment variables."""
    return PollerConfig(
        update_interval=_env_float("NFL_UPDATE_INTERVAL_SECONDS", DEFAULT_UPDATE_INTERVAL_SECONDS),
        update_interval_live=_env_float(
            "NFL_UPDATE_INTERVAL_LIVE_SECONDS", DEFAULT_UPDATE_INTERVAL_LIVE_SECONDS
        ),
        request_timeout=_env_float("NFL_REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS),
    )


def settings_env(config: PollerConfig) -> dict[str, str]:
    """Environment variables that make load_settings() return *config*."""
    return {
        "NFL_UPDATE_INTERVAL_SECONDS": str(config.update_interval),
        "NFL_UPDATE_INTERVAL_LIVE_SECONDS": str(config.update_interval_live),
        "NFL_REQUEST_TIMEOUT_SECONDS": str(config.request_timeout),
    }


def config_from_payload(payload: Mapping[str, Any]) -> PollerConfig:
    """Build a config from a host notification payload (intervals in milliseconds)."""
    update_interval = payload.get("updateInterval", DEFAULT_UPDATE_INTERVAL_SECONDS * 1000)
    update_interval_live = payload.get(
        "updateIntervalLive", DEFAULT_UPDATE_INTERVAL_LIVE_SECONDS * 1000
    )
    for key, value in (("updateInterval", update_interval), ("updateIntervalLive", update_interval_live)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{key} must be a number of milliseconds, got {value!r}")
    return PollerConfig(
        update_interval=update_interval / 1000,
        update_interval_live=update_interval_live / 1000,
    )
