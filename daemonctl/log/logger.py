"""
Logger class with structured extra fields.

Extra fields passed as ``extra={...}`` are kept together on the record instead
of being spread over record attributes, so the formatter can render them as
``[key:value]`` pairs after the message.
"""

import logging
from typing import Any

from .config import LogConfig
from .constants import LogConstants

EXTRA_ATTR = "__daemonctl__extra"


class Logger(logging.Logger):
    """
    Logger that carries structured extra fields and a TRACE level.

    Derived loggers (see LoggerFactory.derive) have no handlers of their own
    and hand records to their root's handlers.
    """

    def __init__(
        self,
        name: str,
        config: LogConfig | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        if config is None:
            config = LogConfig()

        if config.level is False:
            super().__init__(name, logging.CRITICAL + 1)
            self._logging_disabled = True
        else:
            super().__init__(name, config.level)
            self._logging_disabled = False

        self._config = config
        self._extra = extra or {}
        self._root_logger: Logger | None = None

    @property
    def config(self) -> LogConfig:
        return self._config

    @property
    def disabled(self) -> bool:  # type: ignore[override]
        """Check if logging is disabled."""
        return self._logging_disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._logging_disabled = value

    def makeRecord(  # type: ignore[override]
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: object,
        args: Any,
        exc_info: Any,
        func: str | None = None,
        extra: dict[str, Any] | None = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        """Create a record with pre-populated and per-call extra fields merged."""
        record = super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func=func, sinfo=sinfo
        )
        merged = dict(self._extra)
        if extra:
            merged.update(extra)
        setattr(record, EXTRA_ATTR, merged)
        return record

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a TRACE level message (below DEBUG)."""
        if self.isEnabledFor(LogConstants.TRACE):
            self._log(LogConstants.TRACE, msg, args, **kwargs)

    def isEnabledFor(self, level: int) -> bool:
        if self._logging_disabled:
            return False
        return super().isEnabledFor(level)

    def callHandlers(self, record: logging.LogRecord) -> None:
        """Send derived loggers' records to the root logger's handlers."""
        if self._root_logger is None:
            super().callHandlers(record)
            return
        for handler in self._root_logger.handlers:
            if record.levelno >= handler.level:
                handler.handle(record)
