"""Clients for the daemon's health and introspection endpoint."""

from .base import SKIP_PLUGIN, Connector, DaemonClient, InitError, Plugin
from .http import HTTPDaemonClient, base_url, connect_http

__all__ = [
    "SKIP_PLUGIN",
    "Connector",
    "DaemonClient",
    "InitError",
    "Plugin",
    "HTTPDaemonClient",
    "base_url",
    "connect_http",
]
