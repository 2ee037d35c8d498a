"""
Process handle for a supervised daemon.

Daemon owns at most one child process plus the address it listens on. Every
state-changing operation (start, stop, kill, wait, restart) holds one lock for
its whole body, so operations from different threads are serialized and at
most one process is ever recorded.

Lifecycle:
    EMPTY   --start--------------> RUNNING
    RUNNING --stop/kill----------> RUNNING  (signal sent, not yet reaped)
    RUNNING --wait---------------> EMPTY
    RUNNING --restart------------> RUNNING  (new OS process, same address)
    RUNNING --restart (stop_cb or relaunch fails)--> EMPTY
    EMPTY   --stop/kill/wait/restart--> NotRunningError

Example:
    daemon = Daemon()
    daemon.start("containerd", "tcp://127.0.0.1:9000", ["--log-level", "debug"],
                 stdout=out, stderr=err)
    client = daemon.wait_for_start(Deadline.after(10.0))
    ...
    daemon.stop()
    daemon.wait()
"""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import IO, Any

from .client import DaemonClient
from .deadline import Deadline
from .exceptions import (
    AlreadyRunningError,
    ExitError,
    NotRunningError,
    SignalError,
    SpawnError,
    StateError,
    WaitTimeoutError,
)
from .log import default_lg
from .probe import ReadinessProber
from .signals import CAPABILITIES, SignalCapabilities

# What Popen accepts for stdout/stderr: a file object, a descriptor,
# subprocess.DEVNULL/PIPE, or None to inherit
Sink = IO[Any] | int | None

DEFAULT_ADDRESS_FLAG = "--address"


@dataclass(frozen=True)
class LaunchSpec:
    """Everything needed to (re)launch the daemon identically."""

    executable: str
    args: tuple[str, ...]
    stdout: Sink = None
    stderr: Sink = None

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def spawn(self) -> subprocess.Popen:
        """Start a process from this spec."""
        return subprocess.Popen(self.argv, stdout=self.stdout, stderr=self.stderr)


class Daemon:
    """
    Supervisor for a single daemon process.

    Thread safety: all public operations are serialized by one lock. wait()
    and restart() block while holding it, so a concurrent stop() waits until
    they return.
    """

    def __init__(
        self,
        lg: Any = None,
        prober: ReadinessProber | None = None,
        address_flag: str = DEFAULT_ADDRESS_FLAG,
        capabilities: SignalCapabilities = CAPABILITIES,
    ) -> None:
        """
        Initialize an empty handle.

        Args:
            lg: Logger instance (defaults to the package logger)
            prober: Readiness prober used by wait_for_start
            address_flag: Flag appended before the address on the command line
            capabilities: Termination signal table for this platform
        """
        self._lg = lg if lg is not None else default_lg("daemon")
        self._prober = prober or ReadinessProber(lg=lg)
        self._address_flag = address_flag
        self._caps = capabilities

        self._lock = threading.Lock()
        self._address: str | None = None
        self._process: subprocess.Popen | None = None
        self._spec: LaunchSpec | None = None

    @property
    def address(self) -> str | None:
        """Address recorded by the last successful start."""
        return self._address

    @property
    def process(self) -> subprocess.Popen | None:
        """Currently recorded process, None when the slot is empty."""
        return self._process

    @property
    def pid(self) -> int | None:
        proc = self._process
        return proc.pid if proc else None

    @property
    def launch_spec(self) -> LaunchSpec | None:
        return self._spec

    def is_running(self) -> bool:
        """True if a process is recorded and has not exited yet."""
        proc = self._process
        return proc is not None and proc.poll() is None

    def start(
        self,
        name: str,
        address: str,
        args: Sequence[str] = (),
        stdout: Sink = None,
        stderr: Sink = None,
    ) -> None:
        """
        Launch the daemon.

        The final command line is ``name *args <address_flag> address``. Does
        not wait for readiness; use wait_for_start for that.

        Raises:
            AlreadyRunningError: A process is already recorded
            SpawnError: The process could not be created
        """
        spec = LaunchSpec(
            executable=name,
            args=(*args, self._address_flag, address),
            stdout=stdout,
            stderr=stderr,
        )
        with self._lock:
            if self._process is not None:
                raise AlreadyRunningError(pid=self._process.pid)

            proc = self._spawn(spec, "failed to start daemon")
            self._address = address
            self._process = proc
            self._spec = spec

        self._lg.info(
            "started daemon",
            extra={"pid": proc.pid, "address": address, "executable": name},
        )

    def wait_for_start(self, deadline: Deadline | None = None) -> DaemonClient:
        """
        Wait until the daemon at the recorded address is ready.

        Args:
            deadline: Deadline for the wait. Defaults to the prober's timeout.

        Returns:
            A connected client; the caller is responsible for closing it.

        Raises:
            NotRunningError: No address has been recorded yet
            ProbeError: See ReadinessProber.wait
        """
        with self._lock:
            address = self._address
        if address is None:
            raise NotRunningError()
        if deadline is not None:
            return self._prober.wait(address, deadline)
        with Deadline.after(self._prober.timeout) as owned:
            return self._prober.wait(address, owned)

    def stop(self) -> None:
        """
        Send the graceful termination signal. Does not wait for exit.

        Raises:
            NotRunningError: No process is recorded
            SignalError: The signal could not be delivered
        """
        with self._lock:
            proc = self._require_process()
            try:
                proc.send_signal(self._caps.graceful)
            except OSError as e:
                raise SignalError(f"failed to stop daemon: {e}", pid=proc.pid) from e
        self._lg.debug("sent stop signal", extra={"pid": proc.pid})

    def kill(self) -> None:
        """
        Forcefully kill the daemon. Does not wait for exit.

        Raises:
            NotRunningError: No process is recorded
            SignalError: The signal could not be delivered
        """
        with self._lock:
            proc = self._require_process()
            try:
                proc.kill()
            except OSError as e:
                raise SignalError(f"failed to kill daemon: {e}", pid=proc.pid) from e
        self._lg.debug("sent kill signal", extra={"pid": proc.pid})

    def wait(self, timeout: float | None = None) -> None:
        """
        Block until the daemon exits, then clear the process slot.

        Args:
            timeout: Give up after this many seconds (None waits forever)

        Raises:
            NotRunningError: No process is recorded
            WaitTimeoutError: The process is still running after ``timeout``;
                the slot is left untouched
            ExitError: The process exited with a non-zero status; the slot is
                cleared anyway
        """
        with self._lock:
            proc = self._require_process()
            try:
                returncode = proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired as e:
                raise WaitTimeoutError(
                    "daemon did not exit in time", pid=proc.pid, timeout=timeout
                ) from e
            self._process = None

        self._lg.info(
            "daemon exited", extra={"pid": proc.pid, "returncode": returncode}
        )
        if returncode != 0:
            raise ExitError(returncode, pid=proc.pid)

    def restart(self, stop_cb: Callable[[], None] | None = None) -> None:
        """
        Terminate the daemon, wait for it to exit and launch it again.

        The new process uses the original executable, arguments and output
        sinks, and listens on the same address. Restart makes no readiness
        guarantee; call wait_for_start afterwards.

        Args:
            stop_cb: Called after the old process has exited and before the
                new one starts (e.g. to release a listening socket)

        Raises:
            NotRunningError: No process is recorded
            StateError: No launch spec is recorded; nothing changed
            SignalError: The old process could not be signalled; nothing changed
            SpawnError: The relaunch failed; the slot is now empty

        An exception raised by ``stop_cb`` propagates and also empties the slot.
        """
        with self._lock:
            old = self._require_process()
            spec = self._spec
            if spec is None:
                raise StateError("no launch spec recorded for daemon", pid=old.pid)

            try:
                self._caps.terminate_for_restart(old)
            except OSError as e:
                raise SignalError(
                    f"failed to signal daemon: {e}", pid=old.pid
                ) from e

            returncode = old.wait()
            self._lg.debug(
                "old daemon exited",
                extra={"pid": old.pid, "returncode": returncode},
            )

            # The old process is reaped from here on; any failure empties the slot
            if stop_cb is not None:
                try:
                    stop_cb()
                except BaseException:
                    self._process = None
                    raise

            try:
                proc = self._spawn(spec, "failed to start new daemon instance")
            except SpawnError:
                self._process = None
                raise
            self._process = proc

        self._lg.info(
            "restarted daemon",
            extra={"old_pid": old.pid, "pid": proc.pid, "address": self._address},
        )

    def _require_process(self) -> subprocess.Popen:
        """Return the recorded process; caller must hold the lock."""
        if self._process is None:
            raise NotRunningError()
        return self._process

    def _spawn(self, spec: LaunchSpec, message: str) -> subprocess.Popen:
        try:
            return spec.spawn()
        except (OSError, ValueError) as e:
            self._lg.error(
                message, extra={"executable": spec.executable, "exception": e}
            )
            raise SpawnError(f"{message}: {e}", executable=spec.executable) from e

    def __enter__(self) -> Daemon:
        return self

    def __exit__(self, *args: object) -> None:
        """Kill and reap a still-recorded process."""
        if self._process is None:
            return
        try:
            self.kill()
            self.wait()
        except ExitError:
            pass
        except Exception as e:
            self._lg.warning("failed to clean up daemon", extra={"exception": e})

    def __repr__(self) -> str:
        return f"Daemon(address={self._address!r}, pid={self.pid})"
