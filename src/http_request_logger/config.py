# SPDX-License-Identifier: Apache-2.0
"""
Configuration settings for the request logger server.
"""

import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from http_request_logger.protocol import ConfigurationError

CONFIG_FILE_ENV = "HTTP_REQUEST_LOGGER_CONFIG"

# environment variable -> Settings field
ENV_VARS = {
    "PORT": "port",
    "LISTEN_HOST": "host",
    "LOG_FILE": "log_file",
    "LOG_LEVEL": "log_level",
}

LOG_STDOUT = "stdout"
LOG_STDERR = "stderr"
LOG_DISCARD = "DISCARD"
MIN_LOG_FILE_LENGTH = 5


def get_config_dir() -> Path:
    """Get the config directory.

    Returns:
        Path to the config directory (~/.http-request-logger)
    """
    return Path.home() / ".http-request-logger"


def get_config_file() -> Path:
    """Get config file path, honouring the HTTP_REQUEST_LOGGER_CONFIG override.

    Returns:
        Path to the config file (~/.http-request-logger/config.toml by default)
    """
    override = os.environ.get(CONFIG_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / "config.toml"


def load_config_from_file() -> dict:
    """Load configuration from TOML file.

    Returns:
        Dictionary containing configuration values, empty dict if file doesn't exist
    """
    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib

    config_file = get_config_file()
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"config file {config_file} could not be read: {e}") from e


def load_config_from_env(environ: dict[str, str] | None = None) -> dict:
    """Collect the settings overridden by environment variables."""
    if environ is None:
        environ = dict(os.environ)
    return {field: environ[var] for var, field in ENV_VARS.items() if var in environ}


class Settings(BaseModel):
    """Application settings: defaults, then config file, then environment."""

    model_config = ConfigDict(extra="ignore")

    # Server Configuration
    host: str = "localhost"
    port: int = 8888
    read_timeout: float = 10.0  # max time to read a request body
    write_timeout: float = 10.0  # graceful shutdown budget for in-flight responses
    idle_timeout: float = 120.0  # keep-alive

    # Logging
    log_file: str = LOG_STDERR  # stdout, stderr, DISCARD or a file path
    log_level: str = "INFO"

    favicon_path: str = "./favicon.ico"

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if value < 1 or value > 65535:
            raise ValueError("port should be an integer between 1 and 65535")
        return value

    @field_validator("log_file")
    @classmethod
    def _check_log_file(cls, value: str) -> str:
        if len(value) < MIN_LOG_FILE_LENGTH:
            raise ValueError(
                f"log_file should contain at least {MIN_LOG_FILE_LENGTH} characters "
                f"(got {len(value)})"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def listen_address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def build(cls, **values: Any) -> "Settings":
        """Validate values, turning pydantic errors into ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"invalid configuration: {e}") from e

    @classmethod
    def load(cls, environ: dict[str, str] | None = None, **overrides: Any) -> "Settings":
        """Merge config file, environment and explicit overrides (``None`` overrides are ignored)."""
        values = load_config_from_file()
        values.update(load_config_from_env(environ))
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.build(**values)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from config file and environment
    """
    return Settings.load()
