"""Server settings, loaded from an optional YAML file and then the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from weathernode.protocols.mcp.models import ToolErrorStyle
from weathernode.providers.weatherapi import DEFAULT_BASE_URL
from weathernode.runtime.models import RateLimitConfig

_FIFTEEN_MINUTES_MS = 15 * 60 * 1000


class ConfigError(Exception):
    """Raised when settings cannot be read or fail validation."""


class Settings(BaseModel):
    """Runtime configuration for both surfaces and the weather provider."""

    weather_api_key: str = ""
    default_location: str = "London"
    temp_unit: Literal["C", "F"] = "C"
    weather_api_base_url: str = DEFAULT_BASE_URL

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = "INFO"
    environment: str = "development"
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])

    api_rate_limit: RateLimitConfig = Field(
        default_factory=lambda: RateLimitConfig(window_ms=_FIFTEEN_MINUTES_MS, max_requests=100)
    )
    mcp_rate_limit: RateLimitConfig = Field(
        default_factory=lambda: RateLimitConfig(window_ms=_FIFTEEN_MINUTES_MS, max_requests=50)
    )
    request_log_size: int = Field(default=1000, gt=0)
    otlp_endpoint: str | None = None

    http_tool_errors: ToolErrorStyle = ToolErrorStyle.ERROR
    stream_tool_errors: ToolErrorStyle = ToolErrorStyle.RESULT

    @field_validator("temp_unit", mode="before")
    @classmethod
    def _upper_unit(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


# Flat environment variables and the settings field they feed.
_ENV_FIELDS: dict[str, str] = {
    "WEATHER_API_KEY": "weather_api_key",
    "DEFAULT_LOCATION": "default_location",
    "TEMP_UNIT": "temp_unit",
    "WEATHER_API_BASE_URL": "weather_api_base_url",
    "HOST": "host",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
    "ENVIRONMENT": "environment",
    "ALLOWED_ORIGINS": "allowed_origins",
    "REQUEST_LOG_SIZE": "request_log_size",
    "OTEL_EXPORTER_OTLP_ENDPOINT": "otlp_endpoint",
}

# Environment variables that set one key of a nested rate-limit block.
_ENV_RATE_FIELDS: dict[str, tuple[str, str]] = {
    "API_RATE_WINDOW_MS": ("api_rate_limit", "window_ms"),
    "API_RATE_MAX": ("api_rate_limit", "max_requests"),
    "MCP_RATE_WINDOW_MS": ("mcp_rate_limit", "window_ms"),
    "MCP_RATE_MAX": ("mcp_rate_limit", "max_requests"),
}


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build :class:`Settings` from *path* (YAML) overlaid with *environ*.

    Environment variables in the form ``${VAR}`` or ``$VAR`` inside the
    YAML file are expanded with :func:`os.path.expandvars` before parsing.

    Raises:
        ConfigError: On unreadable files, YAML errors, or validation failures.
    """
    env = os.environ if environ is None else environ
    data: dict[str, Any] = _read_yaml(Path(path)) if path is not None else {}

    for var, field in _ENV_FIELDS.items():
        if env.get(var):
            data[field] = env[var]

    for var, (block, key) in _ENV_RATE_FIELDS.items():
        if env.get(var):
            section = dict(data.get(block) or {})
            section[key] = env[var]
            data[block] = section

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Settings YAML must be a mapping")
    return data
