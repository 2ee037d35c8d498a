"""
Logging errors, part of the DaemonError family.
"""

from typing import Any

from ..exceptions import DaemonError
from .constants import LogConstants


class LogError(DaemonError):
    """Base exception for logging-related errors."""

    pass


class InvalidLogLevelError(LogError, ValueError):
    """A log level name or value that cannot be resolved."""

    def __init__(self, level: Any) -> None:
        self.level = level
        super().__init__(
            f"invalid log level: {level!r}",
            valid=", ".join(LogConstants.LEVEL_NAMES),
        )
