"""Gateway settings loaded from the environment."""

from __future__ import annotations

from typing import Any, Literal, Self, get_args

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)


class Settings(BaseSettings):
    """Configuration for the gateway process.

    Values are read from ``KV_GATEWAY_*`` environment variables and an
    optional ``.env`` file, e.g. ``KV_GATEWAY_REDIS_URL``.
    """

    SERVICE_NAME: str = "kv-gateway"
    LOG_LEVEL: LogLevel = "INFO"
    LOG_FORMAT: Literal["console", "json"] = "console"

    HTTP_HOST: str = "127.0.0.1"
    HTTP_PORT: int = Field(default=8080, ge=0, le=65535)

    BACKEND: Literal["redis", "memory"] = "redis"
    REDIS_URL: str = "redis://127.0.0.1:6379"
    REDIS_SOCKET_TIMEOUT: float | None = Field(default=5.0, gt=0)
    REDIS_CONNECT_TIMEOUT: float | None = Field(default=5.0, gt=0)

    # One in-flight backend call at a time when enabled.
    SERIALIZE_BACKEND_ACCESS: bool = True
    # Must exceed OPERATION_TIMEOUT_SECONDS when both are set.
    LOCK_TIMEOUT_SECONDS: float | None = Field(default=15.0, gt=0)
    OPERATION_TIMEOUT_SECONDS: float | None = Field(default=10.0, gt=0)

    # Map every backend failure to 500 instead of 404/503/500.
    COLLAPSE_BACKEND_ERRORS: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="KV_GATEWAY_",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def check_timeouts(self) -> Self:
        lock_timeout = self.LOCK_TIMEOUT_SECONDS
        operation_timeout = self.OPERATION_TIMEOUT_SECONDS
        if lock_timeout is not None and operation_timeout is not None and lock_timeout <= operation_timeout:
            msg = (
                f"LOCK_TIMEOUT_SECONDS ({lock_timeout}) must be greater than "
                f"OPERATION_TIMEOUT_SECONDS ({operation_timeout})"
            )
            raise ValueError(msg)
        return self
