"""Configuration loading and validation for pooldns.

Brief:
  A pooldns configuration is a small YAML document:

      resolvers: ["1.1.1.1:53", "8.8.8.8"]
      max_retries: 3
      timeout_ms: 2000
      logging:
        level: info

  This module reads it with PyYAML, validates it with a pydantic model and
  builds a Client from the result.

Inputs:
  - YAML config paths or already-parsed mappings

Outputs:
  - ClientConfig instances and constructed Client objects
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..client import Client
from ..pool import ResolverAddress
from ..transports import DEFAULT_TIMEOUT_MS
from .logging_config import LoggingConfig

logger = logging.getLogger("pooldns.config")

DEFAULT_RESOLVERS: List[str] = ["1.1.1.1:53", "1.0.0.1:53"]
DEFAULT_MAX_RETRIES = 3


class ConfigError(ValueError):
    """Brief: Raised when a configuration file cannot be read or is invalid."""


class ClientConfig(BaseModel):
    """Brief: Typed configuration model for a pooldns Client.

    Inputs:
      - resolvers: Non-empty list of ``host[:port]`` resolver strings.
      - max_retries: Attempts per resolution (>= 1).
      - timeout_ms: Per-exchange socket timeout in milliseconds (>= 1).
      - logging: LoggingConfig section handed to init_logging().

    Outputs:
      - ClientConfig instance with resolvers normalized to ``host:port``.
    """

    model_config = ConfigDict(extra="forbid")

    resolvers: List[str] = Field(default_factory=lambda: list(DEFAULT_RESOLVERS))
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=1)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=1)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("resolvers")
    @classmethod
    def _normalize_resolvers(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one resolver is required")
        return [str(ResolverAddress(v)) for v in value]


def parse_config(data: Optional[Dict[str, Any]]) -> ClientConfig:
    """
    Brief: Validate an already-parsed configuration mapping.

    Inputs:
      - data: Mapping from YAML (None is treated as empty).

    Outputs:
      - ClientConfig; raises ConfigError on validation failure.

    Example:
      >>> parse_config({"resolvers": ["9.9.9.9"]}).resolvers
      ['9.9.9.9:53']
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("configuration root must be a mapping")
    try:
        return ClientConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc


def load_config(path: str) -> ClientConfig:
    """
    Brief: Read and validate a YAML configuration file.

    Inputs:
      - path: Filesystem path to the YAML document.

    Outputs:
      - ClientConfig; raises ConfigError when unreadable or invalid.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse config {path}: {exc}") from exc
    logger.debug("Loaded config from %s", path)
    return parse_config(data)


def build_client(cfg: ClientConfig, **kwargs: Any) -> Client:
    """Brief: Construct a Client from a validated ClientConfig."""
    return Client(
        cfg.resolvers,
        cfg.max_retries,
        timeout_ms=cfg.timeout_ms,
        **kwargs,
    )
