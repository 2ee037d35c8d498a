"""
Factory for creating and deriving daemonctl loggers.
"""

import logging
import sys
from typing import Any, TextIO, cast

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        extra: dict[str, Any] | None = None,
        stream: TextIO | None = None,
    ) -> Logger:
        """
        Create a logger writing to ``stream`` (stdout by default).

        An existing logger with the same name is returned unchanged.

        Example:
            >>> lg = LoggerFactory.create("/daemonctl", LogConfig.from_params("debug"))
            >>> lg.info("started daemon", extra={"pid": 4242})
            [12:34:56,789] [I] started daemon        [pid:4242] [1234] [/daemonctl]
        """
        existing = LoggerFactory._check_existing_logger(name)
        if existing is not None:
            return existing

        lg = Logger(name, config, extra)
        handler = logging.StreamHandler(stream or sys.stdout)
        if config.level is not False:
            handler.setLevel(config.level)
        handler.setFormatter(LogFormatter(config))
        lg.addHandler(handler)
        lg.propagate = False
        lg.parent = logging.root

        logging.root.manager.loggerDict[name] = lg
        return lg

    @staticmethod
    def create_root(config: LogConfig, stream: TextIO | None = None) -> Logger:
        """Create the ``/`` root logger."""
        return LoggerFactory.create("/", config, stream=stream)

    @staticmethod
    def _check_existing_logger(name: str) -> Logger | None:
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            return existing
        return None

    @staticmethod
    def derive(parent: Logger, tags: str | list[str]) -> Logger:
        """
        Derive a "view" logger that shares the root's handlers.

        Examples:
            >>> LoggerFactory.derive(root, "probe").name
            '/probe'
            >>> LoggerFactory.derive(root, ["daemon", "probe"]).name
            '/daemon/probe'
        """
        if isinstance(tags, str):
            tags = [tags]

        prefix = parent.name if parent.name.endswith("/") else parent.name + "/"
        name = prefix + "/".join(tags)

        existing = LoggerFactory._check_existing_logger(name)
        if existing is not None:
            return existing

        root = parent._root_logger or parent
        lg = Logger(name, parent.config, dict(parent._extra))
        lg._root_logger = cast(Logger, root)
        lg.parent = parent
        lg.propagate = False

        logging.root.manager.loggerDict[name] = lg
        return lg
