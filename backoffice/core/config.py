"""Environment-driven configuration objects for the back-office."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from backoffice.core.constants import (
    DEFAULT_POLL_INTERVALS,
    PollScope,
)


def _str_to_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"true", "1", "yes", "y"}


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(slots=True)
class RemoteConfig:
    url: str
    anon_key: str
    timeout: float = 10.0
    max_retries: int = 3
    backoff: float = 1.0

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)


@dataclass(slots=True)
class SyncConfig:
    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 30.0
    drain_interval: float = 2.0
    poll_intervals: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_POLL_INTERVALS))


@dataclass(slots=True)
class ApiConfig:
    host: str
    port: int
    debug: bool


@dataclass(slots=True)
class Settings:
    remote: RemoteConfig
    sync: SyncConfig
    api: ApiConfig
    sentry_dsn: str | None = None
    environment: str = "development"

    @property
    def remote_configured(self) -> bool:
        return self.remote.configured


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    remote = RemoteConfig(
        url=os.getenv("SUPABASE_URL", "").rstrip("/"),
        anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
        timeout=_float_env("REMOTE_TIMEOUT", 10.0),
        max_retries=_int_env("REMOTE_MAX_RETRIES", 3),
        backoff=_float_env("REMOTE_BACKOFF", 1.0),
    )

    poll_intervals = {
        PollScope.CATALOG: _float_env("POLL_CATALOG_SECONDS", DEFAULT_POLL_INTERVALS[PollScope.CATALOG]),
        PollScope.ORDERS: _float_env("POLL_ORDERS_SECONDS", DEFAULT_POLL_INTERVALS[PollScope.ORDERS]),
        PollScope.USERS: _float_env("POLL_USERS_SECONDS", DEFAULT_POLL_INTERVALS[PollScope.USERS]),
    }
    sync = SyncConfig(
        max_attempts=_int_env("SYNC_MAX_ATTEMPTS", 5),
        base_delay=_float_env("SYNC_BASE_DELAY", 1.0),
        max_delay=_float_env("SYNC_MAX_DELAY", 30.0),
        drain_interval=_float_env("SYNC_DRAIN_INTERVAL", 2.0),
        poll_intervals=poll_intervals,
    )

    api = ApiConfig(
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=_int_env("PORT", 8080),
        debug=_str_to_bool(os.getenv("API_DEBUG")),
    )

    return Settings(
        remote=remote,
        sync=sync,
        api=api,
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        environment=os.getenv("ENVIRONMENT", "development"),
    )
