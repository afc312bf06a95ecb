from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Self

from pydantic import (
    AliasChoices,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ConfigurationMissingError(RuntimeError):
    """Raised at boot when required environment variables are absent or empty."""

    def __init__(self, missing: list[str] | tuple[str, ...]):
        self.missing = tuple(missing)
        super().__init__(f"Missing required environment variables: {', '.join(self.missing)}")


@dataclass(frozen=True)
class AppSection:
    name: str
    environment: str
    version: str


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    json_format: bool


@dataclass(frozen=True)
class CronConfig:
    enabled: bool
    interval_minutes: int


@dataclass(frozen=True)
class ContextConfig:
    timeout_ms: int


@dataclass(frozen=True)
class AppConfig:
    app: AppSection
    server: ServerConfig
    logging: LoggingConfig
    cron: CronConfig
    context: ContextConfig


class Settings(BaseSettings):
    """Settings loaded from environment variables and optional dotenv files.

    ``.env.local`` is read after ``.env`` so local overrides win; real
    environment variables take precedence over both.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    app_name: str = Field(default="Execution Context Service", validation_alias="APP_NAME")
    environment: str = Field(default="", validation_alias=AliasChoices("APP_ENV", "ENVIRONMENT"))
    version: str = Field(default="1.0.0", validation_alias="APP_VERSION")
    host: str = Field(default="localhost", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")
    cron_enabled: bool = Field(default=False, validation_alias="CRON_ENABLED")
    cron_interval: int = Field(default=30, validation_alias="CRON_INTERVAL")
    context_timeout: int = Field(default=30000, validation_alias="CONTEXT_TIMEOUT")

    @field_validator("environment", mode="before")
    @classmethod
    def _strip_environment(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("host", "version", "app_name", mode="before")
    @classmethod
    def _fallback_blank(cls, value: Any, info: ValidationInfo) -> str:
        text = str(value if value is not None else "").strip()
        return text or cls.model_fields[info.field_name].default

    @field_validator("port", "cron_interval", "context_timeout", mode="before")
    @classmethod
    def _parse_int_or_default(cls, value: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        try:
            return int(str(value).strip())
        except (TypeError, ValueError):
            logger.warning(
                "config_invalid_integer",
                extra={"field": info.field_name, "value": value, "default": default},
            )
            return default

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        level = str(value or "").strip().lower()
        if not level:
            return "info"
        valid_levels = {"debug", "info", "warning", "error", "critical"}
        if level not in valid_levels:
            msg = f"Invalid log level: {value}. Must be one of {sorted(valid_levels)}"
            raise ValueError(msg)
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def _validate_log_format(cls, value: Any) -> str:
        fmt = str(value or "json").strip().lower()
        if fmt not in {"json", "text"}:
            msg = f"Invalid log format: {value}. Must be 'json' or 'text'"
            raise ValueError(msg)
        return fmt

    @field_validator("cron_enabled", mode="before")
    @classmethod
    def _strict_true(cls, value: Any) -> bool:
        # Only the exact lowercase string "true" enables the scheduled job.
        if isinstance(value, bool):
            return value
        return value == "true"

    @model_validator(mode="after")
    def _ensure_required(self) -> Self:
        if not self.environment:
            raise ConfigurationMissingError(["APP_ENV"])
        return self

    def as_app_config(self) -> AppConfig:
        return AppConfig(
            app=AppSection(name=self.app_name, environment=self.environment, version=self.version),
            server=ServerConfig(host=self.host, port=self.port),
            logging=LoggingConfig(level=self.log_level, json_format=self.log_format == "json"),
            cron=CronConfig(enabled=self.cron_enabled, interval_minutes=self.cron_interval),
            context=ContextConfig(timeout_ms=self.context_timeout),
        )


def load_config(*, env_file: str | tuple[str, ...] | None = (".env", ".env.local")) -> AppConfig:
    """Load application configuration from the environment.

    Args:
        env_file: Dotenv file(s) to read; ``None`` disables dotenv loading.

    Returns:
        Immutable AppConfig instance.

    Raises:
        ConfigurationMissingError: If a required variable is absent or empty.
        RuntimeError: If any other value fails validation.
    """
    try:
        settings = Settings(_env_file=env_file)
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    return settings.as_app_config()
