"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = Field(default="chatflow")
    server_port: int = Field(default=3000)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)
    temporal_host_port: str = Field(default="localhost:7233")
    temporal_namespace: str = Field(default="default")
    temporal_api_key: str | None = Field(default=None)
    temporal_task_queue: str = Field(default="my-task-queue")
    temporal_tls_enabled: bool = Field(default=False)
    greet_timeout_seconds: float = Field(default=10.0, gt=0)
    greet_max_attempts: int = Field(default=3, ge=1)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("temporal_api_key", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: str | None) -> str | None:
        if value == "":
            return None
        return value

    @field_validator(
        "temporal_host_port",
        "temporal_namespace",
        "temporal_task_queue",
        mode="before",
    )
    @classmethod
    def empty_string_to_default(cls, value: str | None, info: ValidationInfo) -> str | None:
        # An exported-but-empty variable falls back to the default value.
        if value in (None, ""):
            return cls.model_fields[info.field_name].default
        return value


@lru_cache
def get_settings() -> AppSettings:
    """Return cached application settings instance."""

    return AppSettings()
