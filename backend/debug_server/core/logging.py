# debug_server/core/logging.py
"""
Console logging configuration.

The operator watches the server's stdout as a running transcript: the startup
banner, one echo line per accepted event, malformed-input errors and the final
count on shutdown. All of it goes through the `debug_server` logger hierarchy.

Only that hierarchy is configured here. uvicorn configures its own loggers and
the root logger is left alone.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "debug_server"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the `debug_server` logger.

    Args:
        level: Logging level as a string (e.g. "INFO", "DEBUG", "WARNING").

    Behavior:
    - Sets a single stream handler to stdout
    - Applies the same readable format everywhere
    - Safe to call more than once (handlers are replaced, not stacked)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    app_logger.addHandler(handler)
    app_logger.setLevel(log_level)
