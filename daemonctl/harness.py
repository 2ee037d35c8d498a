"""
Context manager running a configured daemon for the duration of a block.

Typical integration test usage:

    cfg = load_config("etc/itest.yaml")
    with DaemonHarness(cfg) as h:
        h.client.plugins()
        h.restart()

On enter the daemon is started and probed until ready. On exit the client is
closed, the daemon is stopped (escalating to kill after the configured
shutdown timeout) and the output files are closed.
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable
from typing import IO, Any

from .client import Connector, DaemonClient
from .config import SupervisorConfig
from .exceptions import DaemonError, ExitError, WaitTimeoutError
from .log import LogConfig, Logger, LoggerFactory
from .process import Daemon
from .probe import ReadinessProber


def create_lg_from_config(config: SupervisorConfig, name: str = "/daemonctl") -> Logger:
    """Create a logger from the ``logging`` section of ``config``."""
    return LoggerFactory.create(name, LogConfig.from_config(config.logging.model_dump()))


class DaemonHarness:
    """
    Start a daemon from configuration and tear it down reliably.

    Attributes:
        daemon: The underlying Daemon handle
        client: Client of the ready daemon (None outside the with block)
    """

    def __init__(
        self,
        config: SupervisorConfig,
        lg: Any = None,
        connect: Connector | None = None,
    ) -> None:
        self._config = config
        self._lg = lg if lg is not None else create_lg_from_config(config)
        self._prober = ReadinessProber(
            lg=self._lg,
            connect=connect,
            interval=config.probe.interval,
            timeout=config.probe.timeout,
            skip_sentinel=config.probe.skip_sentinel,
        )
        self.daemon = Daemon(
            lg=self._lg,
            prober=self._prober,
            address_flag=config.daemon.address_flag,
        )
        self.client: DaemonClient | None = None
        self._sinks = contextlib.ExitStack()

    def _open_sink(self, path: str | None) -> IO[Any] | None:
        if path is None:
            return None
        return self._sinks.enter_context(open(path, "ab"))

    def start(self) -> DaemonClient:
        """Start the daemon and wait until it is ready."""
        dc = self._config.daemon
        stdout = self._open_sink(dc.stdout)
        stderr = self._open_sink(dc.stderr)
        self.daemon.start(dc.binary, dc.address, dc.args, stdout, stderr)
        self.client = self.daemon.wait_for_start()
        return self.client

    def restart(self, stop_cb: Callable[[], None] | None = None) -> DaemonClient:
        """Restart the daemon and wait until the new instance is ready."""
        self._close_client()
        self.daemon.restart(stop_cb=stop_cb)
        self.client = self.daemon.wait_for_start()
        return self.client

    def shutdown(self) -> None:
        """Stop the daemon, escalating to kill after the shutdown timeout."""
        self._close_client()
        if self.daemon.process is None:
            return

        timeout = self._config.daemon.shutdown_timeout
        self.daemon.stop()
        try:
            self.daemon.wait(timeout=timeout)
        except WaitTimeoutError:
            self._lg.warning(
                "daemon did not stop in time, killing",
                extra={"pid": self.daemon.pid, "timeout": timeout},
            )
            self.daemon.kill()
            with contextlib.suppress(ExitError):
                self.daemon.wait()
        except ExitError as e:
            self._lg.debug("daemon exit status", extra={"returncode": e.returncode})

    def _close_client(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None

    def __enter__(self) -> DaemonHarness:
        try:
            self.start()
        except BaseException:
            self.__exit__()
            raise
        return self

    def __exit__(self, *args: object) -> None:
        try:
            self.shutdown()
        except DaemonError as e:
            self._lg.error("failed to shut down daemon", extra={"exception": e})
        finally:
            self._sinks.close()
