"""
hostbridge/utils/settings.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single source of truth* for startup configuration
of the hostbridge HTTP client.

It is responsible for:
- Defining all supported configuration fields (via Pydantic BaseSettings)
- Loading default values from parameters/parameters.yaml
- Overriding defaults with environment variables (HOSTBRIDGE_*)
- Recovering from malformed values (e.g. a non-numeric timeout) by
  falling back to defaults instead of failing
- Exposing a cached, fully-validated Settings object to the application

LOAD & PRECEDENCE MODEL
-----------------------
Configuration is loaded in the following order (last wins):

1) YAML defaults from:
       parameters/parameters.yaml
2) Environment variables:
       HOSTBRIDGE_*

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Holding the *runtime* host value (see hostbridge/client/configuration.py;
  the host can change after startup, Settings cannot)
- HTTP calls
- Command handling

DESIGN INTENT
-------------
- All startup-configurable behavior MUST be declared here
- Malformed timeout values are never surfaced to callers; they are
  logged and replaced by the default
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import structlog
import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

PARAMETERS_PATH = Path(__file__).resolve().parents[2] / "parameters" / "parameters.yaml"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_TIMEOUT_MS = 3000

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_timeout_ms(value: Any, default: int = DEFAULT_TIMEOUT_MS) -> int:
    """
    Lenient integer parse for the timeout setting.

    - int -> used as-is
    - str -> leading integer digits are used ("2500ms" -> 2500)
    - anything unparseable, zero or negative -> default
    """
    if isinstance(value, bool):
        return default

    parsed: int | None = None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        parsed = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            parsed = int(match.group(1))

    if parsed is None or parsed <= 0:
        if value is not None:
            logger.warning("timeout_ms_invalid_using_default", value=str(value), default=default)
        return default
    return parsed


class Settings(BaseSettings):
    """
    Startup settings for the hostbridge client.

    Load order / precedence:
        1) YAML defaults (parameters/parameters.yaml)
        2) Environment variables (HOSTBRIDGE_*), overriding YAML
    """

    model_config = SettingsConfigDict(
        env_prefix="HOSTBRIDGE_",
        extra="ignore",
    )

    # Service metadata
    service_name: str = "hostbridge"
    environment: str = "local"
    log_level: str = "INFO"

    # Endpoint host; request paths are appended to it verbatim
    host: str = DEFAULT_HOST

    # Uniform request timeout for all four call variants
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    # Percent-encode GET query keys/values (raw key=value when False)
    encode_query: bool = False

    @field_validator("host", mode="before")
    @classmethod
    def _host_fallback(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value):
            return DEFAULT_HOST
        return value

    @field_validator("timeout_ms", mode="before")
    @classmethod
    def _timeout_fallback(cls, value: Any) -> int:
        return parse_timeout_ms(value)


@lru_cache(maxsize=1)
def _load_yaml_parameters() -> Dict[str, Any]:
    """
    Load base configuration from parameters/parameters.yaml.

    Cached to guarantee consistent config during process lifetime.
    """
    if not PARAMETERS_PATH.exists():
        logger.warning("parameters_yaml_missing", expected=str(PARAMETERS_PATH))
        return {}

    try:
        with PARAMETERS_PATH.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning(
                "parameters_yaml_not_dict",
                path=str(PARAMETERS_PATH),
                type=type(data).__name__,
            )
            return {}
        logger.info("parameters_yaml_loaded", path=str(PARAMETERS_PATH))
        return data
    except (OSError, yaml.YAMLError) as exc:
        logger.error("parameters_yaml_load_error", path=str(PARAMETERS_PATH), error=str(exc))
        return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Construct and return the final validated Settings object.

    Cached (singleton per process). Code needing startup configuration
    should call this function rather than instantiate Settings() directly.
    """
    # 1) YAML defaults
    yaml_data = _load_yaml_parameters()

    # 2) env overrides (partial)
    try:
        env_settings = Settings()
        env_data = env_settings.model_dump(exclude_unset=True)
        logger.info("settings_loaded_env_only_partial", fields=list(env_data.keys()))
    except ValidationError as exc:
        logger.warning("settings_env_validation_error", errors=exc.errors())
        env_data = {}

    # 3) merge + final validation
    merged: Dict[str, Any] = {**yaml_data, **env_data}
    settings = Settings.model_validate(merged)

    logger.info(
        "settings_loaded",
        environment=settings.environment,
        service_name=settings.service_name,
        host=settings.host,
        timeout_ms=settings.timeout_ms,
        encode_query=settings.encode_query,
    )

    return settings
