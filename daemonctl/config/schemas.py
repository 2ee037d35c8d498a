"""
Configuration schemas using Pydantic for validation.

A supervisor config file looks like:

    daemon:
      binary: /usr/local/bin/containerd
      address: tcp://127.0.0.1:9000
      args: [--log-level, debug]
      stdout: /tmp/itest/containerd.out
      stderr: /tmp/itest/containerd.err
    probe:
      interval: 0.5
      timeout: 10
    logging:
      level: debug
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..client import SKIP_PLUGIN
from ..log import LogConstants


class DaemonConfig(BaseModel):
    """How to launch the daemon."""

    binary: str = Field(..., min_length=1, description="Daemon executable")
    address: str = Field(..., min_length=1, description="Address the daemon listens on")
    args: list[str] = Field(default_factory=list, description="Extra arguments")
    address_flag: str = Field(
        default="--address", description="Flag that precedes the address"
    )
    stdout: str | None = Field(
        default=None, description="File for daemon stdout (None inherits)"
    )
    stderr: str | None = Field(
        default=None, description="File for daemon stderr (None inherits)"
    )
    shutdown_timeout: float = Field(
        default=10.0, gt=0, description="Seconds to wait after stop before kill"
    )

    @field_validator("args", mode="before")
    @classmethod
    def split_args(cls, v: Any) -> Any:
        """Accept a single string (e.g. from an env override) as one argument."""
        if isinstance(v, str):
            return [v]
        return v

    model_config = ConfigDict(extra="forbid")


class ProbeConfig(BaseModel):
    """Readiness polling settings."""

    interval: float = Field(default=0.5, gt=0, description="Seconds between attempts")
    timeout: float = Field(default=10.0, gt=0, description="Readiness deadline")
    skip_sentinel: str = Field(
        default=SKIP_PLUGIN, min_length=1, description="Marker of skipped plugins"
    )

    model_config = ConfigDict(extra="forbid")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str | bool = Field(default="info", description="Global log level")
    colors: bool = Field(default=True, description="Colored console output")
    micros: bool = Field(default=False, description="Show microsecond timestamps")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: Any) -> Any:
        """Validate log level is a recognized level."""
        if isinstance(v, str) and v.lower() not in LogConstants.LEVEL_NAMES:
            valid = ", ".join(LogConstants.LEVEL_NAMES)
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {valid}")
        return v

    model_config = ConfigDict(extra="forbid")


class SupervisorConfig(BaseModel):
    """Complete supervisor configuration."""

    daemon: DaemonConfig
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")
