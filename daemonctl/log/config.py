"""
Configuration for daemonctl loggers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .constants import LogConstants
from .exceptions import InvalidLogLevelError


def resolve_level(level: str | int | bool) -> int | bool:
    """
    Resolve a log level from a name, a number or a boolean.

    Args:
        level: Level name ("debug", "info", ...), numeric value, or False to
            disable logging. True maps to INFO.

    Returns:
        Numeric level, or False when logging is disabled

    Raises:
        InvalidLogLevelError: If the level is not recognized
    """
    if isinstance(level, bool):
        return logging.INFO if level else False
    if isinstance(level, int):
        return level
    if level.isnumeric():
        return int(level)
    resolved = LogConstants.LEVEL_NAMES.get(level.lower())
    if resolved is None:
        raise InvalidLogLevelError(level)
    return resolved


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable logger configuration.

    Attributes:
        level: Numeric level, or False to disable logging
        micros: Append microseconds to timestamps
        colors: Render ANSI colors
    """

    level: int | bool = logging.INFO
    micros: bool = False
    colors: bool = True

    @classmethod
    def from_params(
        cls, level: str | int | bool, micros: bool = False, colors: bool = True
    ) -> LogConfig:
        """Create a LogConfig, resolving ``level`` from its name if needed."""
        return cls(level=resolve_level(level), micros=micros, colors=colors)

    @classmethod
    def from_config(cls, config_dict: dict[str, Any]) -> LogConfig:
        """
        Create a LogConfig from a ``logging`` configuration section.

        Example:
            LogConfig.from_config({"level": "debug", "colors": False})
        """
        return cls.from_params(
            level=config_dict.get("level", "info"),
            micros=config_dict.get("micros", False),
            colors=config_dict.get("colors", True),
        )
