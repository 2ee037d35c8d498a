"""
HTTP implementation of the daemon health client.

Talks to two JSON endpoints on the daemon:

    GET /_health   -> {"status": "serving"}
    GET /_plugins  -> {"plugins": [{"type": ..., "id": ..., "init_err": {"message": ...}}]}

Creating a client does not contact the daemon; the first request does.
"""

from __future__ import annotations

from urllib.parse import urlsplit

import requests

from .base import Plugin

HEALTH_PATH = "/_health"
PLUGINS_PATH = "/_plugins"

# Health statuses that count as serving
SERVING_STATUSES = frozenset({"serving", "ok"})


def base_url(address: str) -> str:
    """
    Convert a daemon address into an HTTP base URL.

    Accepts ``tcp://host:port``, ``http(s)://host:port`` or bare ``host:port``.

    Raises:
        ValueError: If the address has an unsupported scheme or no host
    """
    if "://" not in address:
        address = "tcp://" + address
    parts = urlsplit(address)
    if parts.scheme not in ("tcp", "http", "https"):
        raise ValueError(f"unsupported address scheme: {parts.scheme!r}")
    if not parts.hostname:
        raise ValueError(f"address has no host: {address!r}")
    scheme = "https" if parts.scheme == "https" else "http"
    return f"{scheme}://{parts.netloc}{parts.path.rstrip('/')}"


class HTTPDaemonClient:
    """
    Health client backed by a requests Session.

    Example:
        client = HTTPDaemonClient("tcp://127.0.0.1:9000")
        try:
            if client.is_serving(timeout=1.0):
                plugins = client.plugins(timeout=1.0)
        finally:
            client.close()
    """

    def __init__(self, address: str, session: requests.Session | None = None) -> None:
        self._address = address
        self._base_url = base_url(address)
        self._session = session or requests.Session()

    @property
    def address(self) -> str:
        return self._address

    def _get(self, path: str, timeout: float | None) -> dict:
        try:
            resp = self._session.get(self._base_url + path, timeout=timeout)
        except requests.ConnectionError as e:
            raise ConnectionError(f"cannot reach {self._base_url}: {e}") from e
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"expected JSON object from {path}, got {type(data).__name__}")
        return data

    def is_serving(self, timeout: float | None = None) -> bool:
        """
        Ask the daemon whether it is serving.

        Raises:
            ConnectionError: If the daemon cannot be reached
            requests.RequestException: If the request fails otherwise
        """
        data = self._get(HEALTH_PATH, timeout)
        return str(data.get("status", "")).lower() in SERVING_STATUSES

    def plugins(self, timeout: float | None = None) -> list[Plugin]:
        """
        List the daemon's plugins with their init errors.

        Raises:
            ConnectionError: If the daemon cannot be reached
            requests.RequestException: If the request fails otherwise
        """
        data = self._get(PLUGINS_PATH, timeout)
        return [Plugin.from_dict(p) for p in data.get("plugins", [])]

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> HTTPDaemonClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"HTTPDaemonClient({self._address!r})"


def connect_http(address: str) -> HTTPDaemonClient:
    """Default connector: build an HTTP client for ``address``."""
    return HTTPDaemonClient(address)
