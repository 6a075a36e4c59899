"""Logging setup for the `grip` command.

The library itself only ever logs through module-level loggers under `grip`, and
stays silent unless the application configures a handler. While a session is
running the terminal belongs to the drawing, so logs can only go to a file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

__all__ = ["configure_logging"]

ENV_PREFIX = "GRIP_"
LOGGER_NAME = "grip"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _env(name: str) -> str | None:
    value = os.getenv(ENV_PREFIX + name)

    if value is None or value.strip() == "":
        return None

    return value


def configure_logging(
    file_path: str | os.PathLike[str] | None = None, level: str | None = None
) -> logging.Handler | None:
    """Sends `grip` logs to a file.

    Args:
        file_path: The file to append to. Falls back to `$GRIP_LOG_FILE`; if neither
            is set, nothing is configured.
        level: The minimum level name to log. Falls back to `$GRIP_LOG_LEVEL`, then
            `INFO`.

    Returns:
        The handler that was installed, if any.

    Raises:
        ValueError: The level is not a known logging level name.
    """

    file_path = file_path or _env("LOG_FILE")

    if file_path is None:
        return None

    level_name = (level or _env("LOG_LEVEL") or "INFO").upper()
    level_value = logging.getLevelName(level_name)

    if not isinstance(level_value, int):
        raise ValueError(f"Unknown log level {level_name!r}.")

    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level_value)
    logger.addHandler(handler)

    return handler
