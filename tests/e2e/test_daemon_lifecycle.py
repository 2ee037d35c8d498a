"""
End-to-end tests against a real HTTP daemon.

Runs tests/fixtures/fake_daemon.py as the supervised process and probes it
over HTTP with the default connector.
"""

import json
import subprocess
import sys
from collections.abc import Generator

import pytest

from daemonctl import (
    Daemon,
    DaemonHarness,
    Deadline,
    DeadlineExceededError,
    HTTPDaemonClient,
    Plugin,
    PluginLoadError,
    ReadinessProber,
    SupervisorConfig,
    UnreachableError,
)
from tests.fixtures.daemon import FAKE_DAEMON, SLEEPER, free_port

pytestmark = [pytest.mark.e2e, pytest.mark.slow]


@pytest.fixture
def address() -> str:
    return f"tcp://127.0.0.1:{free_port()}"


@pytest.fixture
def http_daemon(test_lg) -> Generator[Daemon, None, None]:
    prober = ReadinessProber(lg=test_lg, interval=0.05, timeout=10.0)
    with Daemon(lg=test_lg, prober=prober) as d:
        yield d


def _start_fake(daemon, address, *extra):
    daemon.start(
        sys.executable,
        address,
        [FAKE_DAEMON, *extra],
        subprocess.DEVNULL,
        subprocess.DEVNULL,
    )


def test_start_probe_stop(http_daemon, address):
    _start_fake(http_daemon, address, "--warmup", "0.3")

    with http_daemon.wait_for_start(Deadline.after(10.0)) as client:
        assert isinstance(client, HTTPDaemonClient)
        assert client.is_serving(timeout=1.0)
        assert client.plugins(timeout=1.0) == []

    http_daemon.stop()
    assert http_daemon.wait(timeout=10.0) is None
    assert http_daemon.process is None


def test_skipped_plugin_is_ready(http_daemon, address):
    plugins = [
        {"type": "io.snapshotter.v1", "id": "overlay"},
        {"type": "io.snapshotter.v1", "id": "zfs", "init_err": {"message": "skip plugin: no pool"}},
    ]
    _start_fake(http_daemon, address, "--plugins", json.dumps(plugins))

    with http_daemon.wait_for_start() as client:
        listed = client.plugins(timeout=1.0)

    assert [p.id for p in listed] == ["overlay", "zfs"]
    assert listed[1].skipped()


def test_failed_plugins_are_fatal(http_daemon, address):
    plugins = [
        {"type": "grpc", "id": "cri", "init_err": {"message": "no runtime"}},
        {"type": "io.snapshotter.v1", "id": "aufs", "init_err": {"message": "module missing"}},
    ]
    _start_fake(http_daemon, address, "--plugins", json.dumps(plugins))

    with pytest.raises(PluginLoadError) as exc_info:
        http_daemon.wait_for_start(Deadline.after(10.0))

    assert [(e.plugin_type, e.plugin_id) for e in exc_info.value.errors] == [
        ("grpc", "cri"),
        ("io.snapshotter.v1", "aufs"),
    ]
    assert http_daemon.is_running()


def test_nothing_listening_exceeds_deadline(http_daemon, address):
    http_daemon.start(SLEEPER[0], address, SLEEPER[1:])

    with pytest.raises(DeadlineExceededError) as exc_info:
        http_daemon.wait_for_start(Deadline.after(0.5))

    assert isinstance(exc_info.value.last_error, UnreachableError)
    assert "failed to connect" in str(exc_info.value)


def test_restart_and_reprobe(http_daemon, address):
    _start_fake(http_daemon, address)
    http_daemon.wait_for_start().close()
    old_pid = http_daemon.pid

    http_daemon.restart()

    assert http_daemon.pid != old_pid
    assert http_daemon.address == address
    with http_daemon.wait_for_start() as client:
        assert client.is_serving(timeout=1.0)

    http_daemon.stop()
    assert http_daemon.wait(timeout=10.0) is None


def test_harness_end_to_end(test_lg, address, temp_dir):
    out = temp_dir / "daemon.out"
    cfg = SupervisorConfig(
        daemon={
            "binary": sys.executable,
            "address": address,
            "args": [FAKE_DAEMON, "--banner", "fake daemon up"],
            "stdout": str(out),
        },
        probe={"interval": 0.05, "timeout": 10.0},
    )

    with DaemonHarness(cfg, lg=test_lg) as h:
        assert h.client.plugins() == []
        h.restart()
        assert h.client.is_serving()

    assert h.daemon.process is None
    assert out.read_text().splitlines() == ["fake daemon up", "fake daemon up"]


def test_plugins_listed_over_http(http_daemon, address):
    plugins = [{"type": "grpc", "id": "cri"}]
    _start_fake(http_daemon, address, "--plugins", json.dumps(plugins))

    with http_daemon.wait_for_start() as client:
        assert client.plugins() == [Plugin("grpc", "cri")]
