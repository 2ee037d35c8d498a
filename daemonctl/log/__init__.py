"""
Structured logging for daemonctl.

Loggers are standard ``logging.Logger`` subclasses that keep ``extra`` fields
together and render them after the message:

    lg = create_lg("/daemonctl", "debug")
    lg.info("started daemon", extra={"pid": 4242, "address": "tcp://127.0.0.1:9000"})

Library classes accept an optional ``lg``; without one they derive a child of
the package default logger, which writes warnings and above to stderr.
"""

import logging
import sys

from .config import LogConfig, resolve_level
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .factory import LoggerFactory
from .formatters import LogFormatter
from .logger import Logger

logging.addLevelName(LogConstants.TRACE, "TRACE")

DEFAULT_ROOT = "/daemonctl"


def create_lg(
    name: str, level: str | int | bool = "info", micros: bool = False, colors: bool = True
) -> Logger:
    """
    Create a logger with the specified configuration.

    Example:
        >>> lg = create_lg("/itest", "debug", colors=False)
    """
    return LoggerFactory.create(name, LogConfig.from_params(level, micros, colors))


def derive_lg(lg: Logger, tags: str | list[str]) -> Logger:
    """Derive a child view logger from ``lg``."""
    return LoggerFactory.derive(lg, tags)


def default_lg(component: str) -> Logger:
    """Return the package default logger for ``component``."""
    root = LoggerFactory.create(
        DEFAULT_ROOT,
        LogConfig.from_params("warning", colors=sys.stderr.isatty()),
        stream=sys.stderr,
    )
    return LoggerFactory.derive(root, component)


__all__ = [
    "Logger",
    "LoggerFactory",
    "LogConfig",
    "LogConstants",
    "LogFormatter",
    "LogError",
    "InvalidLogLevelError",
    "resolve_level",
    "create_lg",
    "derive_lg",
    "default_lg",
    "DEFAULT_ROOT",
]
