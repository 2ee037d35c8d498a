"""
Log formatter rendering ``[time] [L] message [key:value] [pid] [name]``.
"""

import logging
from typing import Any

from .config import LogConfig
from .constants import LogConstants
from .logger import EXTRA_ATTR


def _format_value(value: Any) -> str:
    if isinstance(value, BaseException):
        return f"{value.__class__.__name__}: {value}"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class LogFormatter(logging.Formatter):
    """
    Formatter for daemonctl loggers.

    Extra fields are sorted by key and appended after the message, padded to
    a fixed rule width so they line up across lines.
    """

    def __init__(self, config: LogConfig) -> None:
        super().__init__(LogConstants.DEFAULT_FORMAT)
        self._config = config

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record, datefmt)
        if self._config.micros:
            micros = int((record.created % 1) * 1000000) % 1000
            s += f".{micros:03d}"
        return s

    def format(self, record: logging.LogRecord) -> str:
        head = super().format(record)
        exc_text = ""
        if "\n" in head:
            head, exc_text = head.split("\n", 1)
        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        line = head.ljust(rule)

        fields = getattr(record, EXTRA_ATTR, None) or {}
        parts = [f"[{k}:{_format_value(fields[k])}]" for k in sorted(fields)]
        parts.append(f"[{record.process}]")
        parts.append(f"[{record.name}]")
        meta = " ".join(parts)

        if self._config.colors:
            col = LogConstants.LEVEL_COLORS.get(record.levelno, "")
            line = col + line + LogConstants.RESET
            meta = LogConstants.META_COLOR + meta + LogConstants.RESET

        out = f"{line} {meta}"
        if exc_text:
            out += "\n" + exc_text
        return out
