"""Temporal workflow orchestration configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from chatflow.core.config import AppSettings, get_settings


class ConfigurationError(RuntimeError):
    """Raised when a required Temporal setting is missing."""


@dataclass(frozen=True)
class TemporalConfig:
    """Materialized Temporal connection settings."""

    host_port: str
    namespace: str
    api_key: str | None
    task_queue: str
    tls_enabled: bool
    greet_timeout: timedelta = timedelta(seconds=10)
    greet_max_attempts: int = 3

    def require(self) -> "TemporalConfig":
        """Return ``self`` or fail fast when credentials are absent."""

        if not self.api_key:
            raise ConfigurationError("TEMPORAL_API_KEY environment variable is required")
        return self


def get_temporal_config(settings: AppSettings | None = None) -> TemporalConfig:
    settings = settings or get_settings()
    return TemporalConfig(
        host_port=settings.temporal_host_port,
        namespace=settings.temporal_namespace,
        api_key=settings.temporal_api_key,
        task_queue=settings.temporal_task_queue,
        tls_enabled=settings.temporal_tls_enabled,
        greet_timeout=timedelta(seconds=settings.greet_timeout_seconds),
        greet_max_attempts=settings.greet_max_attempts,
    )
