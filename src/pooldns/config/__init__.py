"""Configuration helpers: YAML/pydantic client config and logging setup."""

from .config_parser import (
    ClientConfig,
    ConfigError,
    build_client,
    load_config,
    parse_config,
)
from .logging_config import LoggingConfig, init_logging

__all__ = [
    "ClientConfig",
    "ConfigError",
    "build_client",
    "init_logging",
    "LoggingConfig",
    "load_config",
    "parse_config",
]
