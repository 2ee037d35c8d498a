"""
Supervision of a single long-running daemon for integration testing.

    from daemonctl import Daemon, Deadline

    daemon = Daemon()
    daemon.start("containerd", "tcp://127.0.0.1:9000", [], out, err)
    client = daemon.wait_for_start(Deadline.after(10.0))
"""

from importlib.metadata import PackageNotFoundError, version

from .client import (
    SKIP_PLUGIN,
    DaemonClient,
    HTTPDaemonClient,
    InitError,
    Plugin,
    connect_http,
)
from .config import SupervisorConfig, load_config
from .deadline import Deadline
from .exceptions import (
    AlreadyRunningError,
    ConfigError,
    DaemonError,
    DeadlineExceededError,
    ExitError,
    IntrospectionError,
    NotRunningError,
    NotServingError,
    PluginFailure,
    PluginLoadError,
    ProbeError,
    SignalError,
    SpawnError,
    StateError,
    TransientProbeError,
    UnreachableError,
    WaitTimeoutError,
)
from .harness import DaemonHarness
from .options import RuntimeOptions
from .probe import ReadinessProber
from .process import Daemon, LaunchSpec

try:
    __version__ = version("daemonctl")
except PackageNotFoundError:
    __version__ = "0.1.0-dev"

__all__ = [
    "__version__",
    # Supervision
    "Daemon",
    "LaunchSpec",
    "ReadinessProber",
    "Deadline",
    "DaemonHarness",
    # Client contract
    "DaemonClient",
    "HTTPDaemonClient",
    "Plugin",
    "InitError",
    "SKIP_PLUGIN",
    "connect_http",
    # Configuration
    "SupervisorConfig",
    "load_config",
    "RuntimeOptions",
    # Exceptions
    "DaemonError",
    "StateError",
    "AlreadyRunningError",
    "NotRunningError",
    "SpawnError",
    "SignalError",
    "ExitError",
    "WaitTimeoutError",
    "ProbeError",
    "TransientProbeError",
    "UnreachableError",
    "NotServingError",
    "IntrospectionError",
    "PluginFailure",
    "PluginLoadError",
    "DeadlineExceededError",
    "ConfigError",
]
