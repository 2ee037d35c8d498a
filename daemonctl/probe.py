"""
Readiness polling for a freshly started daemon.

A daemon is ready when its health endpoint reports serving *and* every
mandatory plugin loaded without error. The prober polls on a fixed interval
against a cancellable Deadline:

- could not connect (connect or health check raised ConnectionError):
  transient, retried on the next tick
- connected but not serving: transient, retried on the next tick
- plugin list unavailable: fatal, raised immediately
- a plugin failed to load (not a skip): fatal, raised immediately
- deadline finished first: DeadlineExceededError wrapping the last transient error

Example:
    prober = ReadinessProber(interval=0.5)
    with Deadline.after(10.0) as deadline:
        client = prober.wait("tcp://127.0.0.1:9000", deadline)
"""

from __future__ import annotations

from typing import Any

from .client import SKIP_PLUGIN, Connector, DaemonClient, Plugin, connect_http
from .deadline import Deadline
from .exceptions import (
    DeadlineExceededError,
    IntrospectionError,
    NotServingError,
    PluginFailure,
    PluginLoadError,
    TransientProbeError,
    UnreachableError,
)
from .log import default_lg

DEFAULT_INTERVAL = 0.5
DEFAULT_TIMEOUT = 10.0


def collect_plugin_failures(
    plugins: list[Plugin], sentinel: str = SKIP_PLUGIN
) -> list[PluginFailure]:
    """Return one PluginFailure per plugin whose init error is not a skip."""
    return [
        PluginFailure(p.type, p.id, p.init_error.message)
        for p in plugins
        if p.init_error is not None and p.failed(sentinel)
    ]


class ReadinessProber:
    """
    Polls a daemon's health endpoint until it is ready or the deadline ends.

    The prober holds no per-run state, so one instance can be reused for every
    (re)start of a daemon.
    """

    def __init__(
        self,
        lg: Any = None,
        connect: Connector | None = None,
        interval: float = DEFAULT_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        skip_sentinel: str = SKIP_PLUGIN,
    ) -> None:
        """
        Initialize the prober.

        Args:
            lg: Logger instance (defaults to the package logger)
            connect: Callable building a client for an address
                (defaults to the HTTP client)
            interval: Seconds between attempts
            timeout: Default deadline used by Daemon.wait_for_start when the
                caller does not pass one
            skip_sentinel: Init error marker meaning "declined to load"
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._lg = lg if lg is not None else default_lg("probe")
        self._connect: Connector = connect or connect_http
        self._interval = interval
        self._timeout = timeout
        self._skip_sentinel = skip_sentinel

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def timeout(self) -> float:
        return self._timeout

    def wait(self, address: str, deadline: Deadline) -> DaemonClient:
        """
        Block until the daemon at ``address`` is ready.

        Args:
            address: Address the daemon listens on
            deadline: Deadline bounding the whole wait; cancelling it stops the
                wait before the next attempt

        Returns:
            A connected client for the ready daemon. The caller owns it.

        Raises:
            PluginLoadError: A mandatory plugin failed to load
            IntrospectionError: The plugin list could not be fetched
            DeadlineExceededError: The deadline finished before the daemon was ready
        """
        last_err: TransientProbeError | None = None

        for tick in deadline.ticks(self._interval):
            try:
                client = self._attempt(address, deadline)
            except TransientProbeError as e:
                last_err = e
                self._lg.debug(
                    "daemon not ready",
                    extra={"tick": tick, "address": address, "reason": str(e)},
                )
                continue

            self._lg.info("daemon is ready", extra={"tick": tick, "address": address})
            return client

        self._lg.warning(
            "gave up waiting for daemon",
            extra={"address": address, "last_error": last_err},
        )
        raise DeadlineExceededError(last_err) from last_err

    def _attempt(self, address: str, deadline: Deadline) -> DaemonClient:
        """Run one readiness attempt; transient failures raise TransientProbeError."""
        try:
            client = self._connect(address)
        except Exception as e:
            raise UnreachableError(f"failed to connect: {e}", address=address) from e

        try:
            serving = client.is_serving(timeout=deadline.remaining())
        except ConnectionError as e:
            client.close()
            raise UnreachableError(f"failed to connect: {e}", address=address) from e
        except Exception as e:
            client.close()
            raise NotServingError(
                f"health check failed: {e}", address=address
            ) from e
        if not serving:
            client.close()
            raise NotServingError(
                "connection was successful but service is not available",
                address=address,
            )

        try:
            failures = self._check_plugins(client, deadline)
        except Exception:
            client.close()
            raise
        if failures:
            client.close()
            self._lg.error(
                "daemon plugins failed to load",
                extra={"address": address, "failed": [str(f) for f in failures]},
            )
            raise PluginLoadError(failures)

        return client

    def _check_plugins(
        self, client: DaemonClient, deadline: Deadline
    ) -> list[PluginFailure]:
        try:
            plugins = client.plugins(timeout=deadline.remaining())
        except Exception as e:
            raise IntrospectionError(f"failed to get plugin list: {e}") from e

        for p in plugins:
            if p.skipped(self._skip_sentinel):
                self._lg.debug("plugin skipped", extra={"plugin": f"{p.type}.{p.id}"})
        return collect_plugin_failures(plugins, self._skip_sentinel)
