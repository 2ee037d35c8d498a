"""
Configuration management package.

This module provides:
- load_config / parse_config for YAML supervisor configuration
- Pydantic schemas validating each section
"""

from .config import (
    apply_env_overrides,
    convert_env_value,
    load_config,
    parse_config,
    resolve_variables,
)
from .constants import ENV_PREFIX, MAX_CONFIG_SIZE_BYTES
from .schemas import DaemonConfig, LoggingConfig, ProbeConfig, SupervisorConfig

__all__ = [
    "load_config",
    "parse_config",
    "apply_env_overrides",
    "convert_env_value",
    "resolve_variables",
    "DaemonConfig",
    "ProbeConfig",
    "LoggingConfig",
    "SupervisorConfig",
    "ENV_PREFIX",
    "MAX_CONFIG_SIZE_BYTES",
]
