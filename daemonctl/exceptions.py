"""
Exception hierarchy for daemon supervision.

Every failure raised by daemonctl derives from DaemonError, so callers can
catch the whole family with a single except clause and still tell the classes
apart:

- StateError: the operation does not fit the recorded process state
- SpawnError: the OS refused to create the daemon process
- SignalError: a termination signal could not be delivered
- ProbeError: readiness polling failed (transient, fatal or timed out)
- ConfigError: configuration could not be loaded or validated
"""

from typing import Any


class DaemonError(Exception):
    """
    Base exception for all daemonctl errors.

    Example:
        try:
            daemon.stop()
        except DaemonError as e:
            lg.error("stop failed", extra={"exception": e})
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class StateError(DaemonError):
    """Operation is invalid for the current process slot state."""

    pass


class AlreadyRunningError(StateError):
    """Raised by start when a daemon process is already recorded."""

    def __init__(self, **context: Any) -> None:
        super().__init__("daemon is already running", **context)


class NotRunningError(StateError):
    """Raised by stop, kill, wait and restart when no process is recorded."""

    def __init__(self, **context: Any) -> None:
        super().__init__("daemon is not running", **context)


class SpawnError(DaemonError):
    """The daemon process could not be created."""

    pass


class SignalError(DaemonError):
    """A termination signal could not be delivered to the daemon."""

    pass


class ExitError(DaemonError):
    """The daemon exited with a non-zero return code."""

    def __init__(self, returncode: int, **context: Any) -> None:
        self.returncode = returncode
        if returncode < 0:
            message = f"daemon terminated by signal {-returncode}"
        else:
            message = f"daemon exited with status {returncode}"
        super().__init__(message, **context)


class WaitTimeoutError(DaemonError):
    """The daemon did not exit within the requested wait timeout."""

    pass


class ProbeError(DaemonError):
    """Base class for readiness polling failures."""

    pass


class TransientProbeError(ProbeError):
    """A readiness attempt failed in a way that may resolve by retrying."""

    pass


class UnreachableError(TransientProbeError):
    """The health endpoint could not be connected to."""

    pass


class NotServingError(TransientProbeError):
    """The connection succeeded but the daemon does not report serving."""

    pass


class IntrospectionError(ProbeError):
    """The plugin list could not be retrieved from a serving daemon."""

    pass


class PluginFailure(DaemonError):
    """A single plugin that failed to initialize."""

    def __init__(self, plugin_type: str, plugin_id: str, reason: str) -> None:
        self.plugin_type = plugin_type
        self.plugin_id = plugin_id
        self.reason = reason
        super().__init__(f"failed to load {plugin_type}.{plugin_id}: {reason}")


class PluginLoadError(ProbeError):
    """
    One or more mandatory plugins failed to load.

    Waiting cannot fix a load failure, so this is never retried. Individual
    failures are kept in ``errors`` in the order the daemon reported them.
    """

    def __init__(self, errors: list[PluginFailure]) -> None:
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))


class DeadlineExceededError(ProbeError):
    """The readiness deadline expired before the daemon became ready."""

    def __init__(self, last_error: BaseException | None = None) -> None:
        self.last_error = last_error
        message = "deadline exceeded"
        if last_error is not None:
            message += f": {last_error}"
        super().__init__(message)


class ConfigError(DaemonError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found or too large
        - Invalid YAML syntax
        - Value rejected by schema validation
    """

    pass
