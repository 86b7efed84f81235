"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from quote_sentinel.core.exceptions import ConfigError


class YahooConfig(BaseModel):
    """Yahoo Finance quote provider configuration."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://query1.finance.yahoo.com"
    request_timeout: int = 15
    rate_limit: int = 5

    @field_validator("base_url")
    @classmethod
    def base_url_is_http(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError("base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("rate_limit")
    @classmethod
    def rate_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("rate_limit must be >= 1 request per second")
        return v


class AlphaVantageConfig(BaseModel):
    """Alpha Vantage history provider configuration."""

    model_config = ConfigDict(frozen=True)

    api_key: str = "demo"
    base_url: str = "https://www.alphavantage.co/query"
    request_timeout: int = 60
    requests_per_minute: int = 5

    @field_validator("api_key")
    @classmethod
    def api_key_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("api_key must not be blank")
        return v.strip()

    @field_validator("requests_per_minute")
    @classmethod
    def requests_per_minute_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("requests_per_minute must be >= 1")
        return v


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000
    api_key: str | None = None


class QuoteSentinelConfig(BaseModel):
    """Root configuration for quote-sentinel."""

    model_config = ConfigDict(frozen=True)

    yahoo: YahooConfig = YahooConfig()
    alpha_vantage: AlphaVantageConfig = AlphaVantageConfig()
    api: APIConfig = APIConfig()


ENV_PREFIX = "QUOTE_SENTINEL_"
CONFIG_PATH_VAR = f"{ENV_PREFIX}CONFIG"
DEFAULT_CONFIG_FILE = "quote-sentinel.yml"


def load_config(
    config_path: str | None = None,
    env_prefix: str = ENV_PREFIX,
) -> QuoteSentinelConfig:
    """Build the configuration from defaults, a YAML file and the environment.

    Later sources win: built-in defaults, then the YAML file, then
    ``QUOTE_SENTINEL_*`` variables. A double underscore descends one level::

        QUOTE_SENTINEL_ALPHA_VANTAGE__API_KEY=abc  ->  alpha_vantage.api_key

    The YAML file is ``config_path`` if given, else the file named by
    ``QUOTE_SENTINEL_CONFIG``, else ``quote-sentinel.yml`` in the working
    directory when it exists.

    Raises:
        ConfigError: unreadable file or a value that fails validation.
    """
    path = _find_config_file(config_path)
    settings = _read_yaml(path) if path is not None else {}
    _overlay_env(settings, env_prefix)

    try:
        return QuoteSentinelConfig.model_validate(settings)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration: {e}",
            context={"field": _first_error_location(e), "source": str(path or "env")},
        ) from e


def _find_config_file(explicit: str | None) -> Path | None:
    if explicit is not None:
        source, candidate = "config_path", explicit
    elif os.environ.get(CONFIG_PATH_VAR):
        source, candidate = CONFIG_PATH_VAR, os.environ[CONFIG_PATH_VAR]
    else:
        default = Path(DEFAULT_CONFIG_FILE)
        return default if default.exists() else None

    path = Path(candidate)
    if not path.exists():
        raise ConfigError(
            f"Config file named by {source} not found: {candidate}",
            context={"field": source, "value": candidate},
        )
    return path


def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Cannot parse {path}: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"{path} must hold a mapping of settings, not {type(data).__name__}",
            context={"field": "config_file", "value": str(path)},
        )
    return data


def _overlay_env(settings: dict, prefix: str) -> dict:
    """Write ``<prefix>SECTION__KEY`` variables into ``settings`` in place.

    Values stay strings; pydantic casts them to the declared field types.
    """
    for name, value in os.environ.items():
        if not name.startswith(prefix) or name == f"{prefix}CONFIG":
            continue

        *sections, key = name[len(prefix) :].lower().split("__")
        node = settings
        for section in sections:
            child = node.get(section)
            if not isinstance(child, dict):
                child = node[section] = {}
            node = child
        node[key] = value

    return settings


def _first_error_location(error: ValidationError) -> str:
    errors = error.errors()
    if not errors:
        return ""
    return ".".join(str(part) for part in errors[0]["loc"])
