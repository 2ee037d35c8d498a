"""
Constants for the daemonctl logging system.

Format strings, rule widths, the custom TRACE level and the level name table
used when resolving levels from configuration.
"""

import logging


class LogConstants:
    """Constants for the logging system."""

    DEFAULT_FORMAT: str = "[%(asctime)s] [%(levelname).1s] %(message)s"

    # Messages are padded to this width before extra fields are appended
    DEFAULT_RULE_WIDTH: int = 60
    MICRO_RULE_WIDTH: int = 64

    TRACE: int = 5

    LEVEL_NAMES: dict[str, int | bool] = {
        "trace": TRACE,
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
        "false": False,
    }

    # ANSI escape sequences
    RESET: str = "\x1b[0m"
    LEVEL_COLORS: dict[int, str] = {
        TRACE: "\x1b[38;5;244m",
        logging.DEBUG: "\x1b[38;5;250m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[35;1m",
    }
    META_COLOR: str = "\x1b[38;5;240m"
