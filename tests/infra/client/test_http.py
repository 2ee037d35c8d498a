"""Tests for the HTTP health client."""

from unittest.mock import Mock

import pytest
import requests

from daemonctl.client import HTTPDaemonClient, InitError, Plugin, base_url, connect_http


def _response(payload, status_error=None):
    resp = Mock()
    resp.json.return_value = payload
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    return resp


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.mark.unit
class TestBaseUrl:
    """Tests for address to URL conversion."""

    @pytest.mark.parametrize(
        "address,expected",
        [
            ("tcp://127.0.0.1:9000", "http://127.0.0.1:9000"),
            ("127.0.0.1:9000", "http://127.0.0.1:9000"),
            ("http://localhost:8080/", "http://localhost:8080"),
            ("https://daemon.local:443/api", "https://daemon.local:443/api"),
        ],
    )
    def test_supported_addresses(self, address, expected):
        assert base_url(address) == expected

    def test_unsupported_scheme(self):
        with pytest.raises(ValueError, match="unsupported address scheme"):
            base_url("unix:///run/daemon.sock")

    def test_missing_host(self):
        with pytest.raises(ValueError, match="no host"):
            base_url("tcp://:9000")


@pytest.mark.unit
class TestPluginWireForm:
    """Tests for Plugin.from_dict and skip handling."""

    def test_without_init_error(self):
        p = Plugin.from_dict({"type": "io.snapshotter.v1", "id": "overlay"})
        assert p == Plugin("io.snapshotter.v1", "overlay")
        assert not p.failed()
        assert not p.skipped()

    def test_with_skip_error(self):
        p = Plugin.from_dict(
            {
                "type": "io.snapshotter.v1",
                "id": "zfs",
                "init_err": {"message": "skip plugin: no zfs pool"},
            }
        )
        assert p.init_error == InitError("skip plugin: no zfs pool")
        assert p.skipped()
        assert not p.failed()

    def test_with_real_error(self):
        p = Plugin.from_dict(
            {"type": "grpc", "id": "cri", "init_err": {"message": "bind failed"}}
        )
        assert p.failed()
        assert not p.skipped()

    def test_empty_init_error_is_none(self):
        p = Plugin.from_dict({"type": "grpc", "id": "cri", "init_err": None})
        assert p.init_error is None


@pytest.mark.unit
class TestHTTPDaemonClient:
    """Tests for HTTPDaemonClient with a mocked session."""

    @pytest.mark.parametrize("status,expected", [("serving", True), ("OK", True), ("starting", False)])
    def test_is_serving(self, session, status, expected):
        session.get.return_value = _response({"status": status})
        client = HTTPDaemonClient("tcp://127.0.0.1:9000", session=session)

        assert client.is_serving(timeout=1.5) is expected
        session.get.assert_called_once_with("http://127.0.0.1:9000/_health", timeout=1.5)

    def test_is_serving_missing_status(self, session):
        session.get.return_value = _response({})
        client = HTTPDaemonClient("127.0.0.1:9000", session=session)
        assert client.is_serving() is False

    def test_http_error_propagates(self, session):
        session.get.return_value = _response({}, requests.HTTPError("503 Service Unavailable"))
        client = HTTPDaemonClient("127.0.0.1:9000", session=session)
        with pytest.raises(requests.HTTPError):
            client.is_serving()

    @pytest.mark.parametrize("method", ["is_serving", "plugins"])
    def test_refused_connection_raises_builtin_connection_error(self, session, method):
        session.get.side_effect = requests.ConnectionError("refused")
        client = HTTPDaemonClient("127.0.0.1:9000", session=session)

        with pytest.raises(ConnectionError, match="cannot reach http://127.0.0.1:9000") as exc_info:
            getattr(client, method)()

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    def test_read_timeout_is_not_a_connection_error(self, session):
        session.get.side_effect = requests.ReadTimeout("slow")
        client = HTTPDaemonClient("127.0.0.1:9000", session=session)
        with pytest.raises(requests.ReadTimeout):
            client.is_serving()

    def test_non_object_payload(self, session):
        session.get.return_value = _response(["serving"])
        client = HTTPDaemonClient("127.0.0.1:9000", session=session)
        with pytest.raises(ValueError, match="expected JSON object"):
            client.is_serving()

    def test_plugins(self, session):
        session.get.return_value = _response(
            {
                "plugins": [
                    {"type": "io", "id": "fs"},
                    {"type": "grpc", "id": "cri", "init_err": {"message": "boom"}},
                ]
            }
        )
        client = HTTPDaemonClient("127.0.0.1:9000", session=session)

        plugins = client.plugins(timeout=2.0)

        session.get.assert_called_once_with("http://127.0.0.1:9000/_plugins", timeout=2.0)
        assert plugins == [
            Plugin("io", "fs"),
            Plugin("grpc", "cri", InitError("boom")),
        ]

    def test_plugins_empty(self, session):
        session.get.return_value = _response({})
        client = HTTPDaemonClient("127.0.0.1:9000", session=session)
        assert client.plugins() == []

    def test_close_and_context_manager(self, session):
        with HTTPDaemonClient("127.0.0.1:9000", session=session) as client:
            assert client.address == "127.0.0.1:9000"
        session.close.assert_called_once()

    def test_connect_http_does_not_contact_daemon(self):
        client = connect_http("tcp://127.0.0.1:1")
        try:
            assert isinstance(client, HTTPDaemonClient)
            assert "127.0.0.1:1" in repr(client)
        finally:
            client.close()

    def test_invalid_address_rejected_at_construction(self, session):
        with pytest.raises(ValueError):
            HTTPDaemonClient("unix:///run/daemon.sock", session=session)
        session.get.assert_not_called()
