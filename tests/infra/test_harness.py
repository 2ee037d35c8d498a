"""
Tests for DaemonHarness.

The daemon is a real Python child process; readiness is answered by a
scripted connector so no network is involved.
"""

import sys

import pytest

from daemonctl import DaemonHarness, PluginLoadError, SupervisorConfig
from daemonctl.harness import create_lg_from_config
from tests.fixtures.daemon import (
    SLEEPER,
    FakeClient,
    ScriptedConnector,
    plugin,
    wait_for_lines,
)

ADDRESS = "tcp://127.0.0.1:9000"

STUBBORN = (
    "import signal, time\n"
    "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
    "print('ready', flush=True)\n"
    "time.sleep(60)\n"
)


def _config(args=None, **daemon):
    return SupervisorConfig(
        daemon={
            "binary": sys.executable,
            "address": ADDRESS,
            "args": args if args is not None else SLEEPER[1:],
            "shutdown_timeout": 5.0,
            **daemon,
        },
        probe={"interval": 0.01, "timeout": 5.0},
        logging={"level": "debug", "colors": False},
    )


@pytest.mark.unit
class TestCreateLgFromConfig:
    def test_uses_logging_section(self):
        lg = create_lg_from_config(_config(), name="/harness-test")
        assert lg.name == "/harness-test"
        assert lg.isEnabledFor(10)
        assert lg.config.colors is False


@pytest.mark.integration
class TestDaemonHarness:
    """Start, restart and shutdown through the harness."""

    def test_context_manager_lifecycle(self, test_lg):
        client = FakeClient()
        harness = DaemonHarness(_config(), lg=test_lg, connect=ScriptedConnector(client))

        with harness as h:
            assert h.client is client
            assert h.daemon.is_running()
            assert h.daemon.process.args[-2:] == ["--address", ADDRESS]
            proc = h.daemon.process

        assert proc.poll() is not None
        assert harness.daemon.process is None
        assert harness.client is None
        assert client.closed is True

    def test_restart_replaces_client_and_process(self, test_lg):
        first, second = FakeClient(), FakeClient()
        connector = ScriptedConnector(first, second)
        calls = []

        with DaemonHarness(_config(), lg=test_lg, connect=connector) as h:
            old_pid = h.daemon.pid
            client = h.restart(stop_cb=lambda: calls.append("stopped"))

            assert client is second
            assert h.client is second
            assert first.closed is True
            assert h.daemon.pid != old_pid
            assert calls == ["stopped"]

    def test_readiness_failure_tears_down(self, test_lg):
        client = FakeClient(plugins=[plugin("grpc", "cri", "no runtime")])
        harness = DaemonHarness(_config(), lg=test_lg, connect=ScriptedConnector(client))

        with pytest.raises(PluginLoadError):
            with harness:
                pytest.fail("block must not run")

        assert harness.daemon.process is None

    def test_output_written_to_sink_files(self, test_lg, temp_dir):
        out = temp_dir / "daemon.out"
        err = temp_dir / "daemon.err"
        args = ["-u", "-c", "import sys, time; print('hello'); "
                "print('oops', file=sys.stderr); time.sleep(60)"]
        cfg = _config(args=args, stdout=str(out), stderr=str(err))

        with DaemonHarness(cfg, lg=test_lg, connect=ScriptedConnector(FakeClient())):
            wait_for_lines(out, "hello")
            wait_for_lines(err, "oops")

    def test_shutdown_escalates_to_kill(self, test_lg, log_stream, temp_dir):
        out = temp_dir / "daemon.out"
        cfg = _config(
            args=["-u", "-c", STUBBORN], stdout=str(out), shutdown_timeout=0.2
        )
        harness = DaemonHarness(cfg, lg=test_lg, connect=ScriptedConnector(FakeClient()))

        with harness as h:
            wait_for_lines(out, "ready")
            proc = h.daemon.process

        assert proc.poll() is not None
        assert harness.daemon.process is None
        assert "daemon did not stop in time, killing" in log_stream.getvalue()

    def test_shutdown_without_start_is_noop(self, test_lg):
        harness = DaemonHarness(_config(), lg=test_lg, connect=ScriptedConnector(FakeClient()))
        harness.shutdown()
        assert harness.daemon.process is None
