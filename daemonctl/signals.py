"""
Platform capability table for terminating the daemon.

Windows has no graceful termination signal: Popen.send_signal(SIGTERM) there
is TerminateProcess, which is as forceful as kill. Restart therefore asks the
table whether graceful delivery exists instead of branching on the platform
name itself.
"""

import signal
import subprocess
import sys
from dataclasses import dataclass


@dataclass(frozen=True)
class SignalCapabilities:
    """Termination signals available on a platform."""

    graceful: int
    forceful: int
    supports_graceful: bool

    def terminate_for_restart(self, proc: subprocess.Popen) -> None:
        """Terminate ``proc`` gracefully if the platform can, forcefully otherwise."""
        if self.supports_graceful:
            proc.send_signal(self.graceful)
        else:
            proc.kill()


_POSIX = SignalCapabilities(
    graceful=signal.SIGTERM,
    forceful=getattr(signal, "SIGKILL", signal.SIGTERM),
    supports_graceful=True,
)

_WINDOWS = SignalCapabilities(
    graceful=signal.SIGTERM,
    forceful=signal.SIGTERM,
    supports_graceful=False,
)

_TABLE: dict[str, SignalCapabilities] = {
    "win32": _WINDOWS,
}


def capabilities_for(platform: str) -> SignalCapabilities:
    """
    Look up signal capabilities for a ``sys.platform`` value.

    Unknown platforms are assumed to be POSIX.
    """
    return _TABLE.get(platform, _POSIX)


CAPABILITIES = capabilities_for(sys.platform)
