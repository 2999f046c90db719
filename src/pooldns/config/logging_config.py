"""Logging setup for the pooldns command line.

Brief:
  pooldns modules log through children of the ``pooldns`` logger. The library
  never installs handlers itself; the CLI calls ``init_logging`` once with the
  ``logging`` section of its config, which attaches handlers to the
  ``pooldns`` logger only and leaves the root logger to the host application.

  YAML shape:

      logging:
        level: debug        # any stdlib level name, default warning
        stderr: true        # default true
        file: ./pooldns.log # optional
"""

from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

PACKAGE_LOGGER = "pooldns"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class UTCFormatter(logging.Formatter):
    """ISO-8601 UTC timestamps, e.g. ``2024-05-01T12:00:00.123Z``."""

    converter = time.gmtime
    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"


class LoggingConfig(BaseModel):
    """Brief: The ``logging`` section of a pooldns config file."""

    model_config = ConfigDict(extra="forbid")

    level: str = "warning"
    stderr: bool = True
    file: Optional[str] = None

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"unknown log level {value!r}")
        return value.lower()

    @property
    def levelno(self) -> int:
        return logging.getLevelName(self.level.upper())


def init_logging(
    cfg: Union[LoggingConfig, Mapping[str, Any], None] = None,
) -> logging.Logger:
    """
    Brief: Attach handlers to the ``pooldns`` logger.

    Inputs:
      - cfg: LoggingConfig or an equivalent mapping; None means defaults.

    Outputs:
      - The configured ``pooldns`` logger. Calling again replaces the
        handlers installed by the previous call.
    """
    if not isinstance(cfg, LoggingConfig):
        cfg = LoggingConfig.model_validate(dict(cfg or {}))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(cfg.levelno)
    logger.propagate = False

    formatter = UTCFormatter(LOG_FORMAT)
    handlers = []
    if cfg.stderr:
        handlers.append(logging.StreamHandler(sys.stderr))
    if cfg.file:
        path = os.path.abspath(os.path.expanduser(cfg.file))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    if not handlers:
        handlers.append(logging.NullHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
