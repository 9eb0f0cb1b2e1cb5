"""Logging setup for scenario scripts and the CLI.

Library modules only create module loggers. Scripts call configure_logging()
once, usually with EnvironmentConfig.log_level.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"

_HANDLER_NAME = "loadcheck"

# Level names accepted beyond the stdlib ones
_ALIASES = {"WARN": "WARNING"}


def resolve_level(level: str | int) -> int:
    """Turn a level name (any case, WARN allowed) or number into a logging level.

    Raises:
        ValueError: If the name is not a known level.
    """
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    name = _ALIASES.get(name, name)
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'")
    return resolved


def configure_logging(level: str | int = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stream handler to the "loadcheck" logger.

    Calling again replaces the level and stream instead of stacking handlers.
    """
    root = logging.getLogger("loadcheck")
    root.setLevel(resolve_level(level))

    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return root
