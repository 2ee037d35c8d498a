"""
Contract for the daemon's health and introspection endpoint.

The supervisor only consumes this endpoint. It needs three things from it:
a connection by address that does not itself prove liveness, an "is serving"
query, and the list of loaded plugins with their initialization errors.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

# Marker a plugin puts in its init error when it intentionally declined to load
SKIP_PLUGIN = "skip plugin"


@dataclass(frozen=True)
class InitError:
    """Initialization error reported for a plugin."""

    message: str


@dataclass(frozen=True)
class Plugin:
    """A plugin loaded (or not) by the daemon."""

    type: str
    id: str
    init_error: InitError | None = None

    def skipped(self, sentinel: str = SKIP_PLUGIN) -> bool:
        """True if the plugin intentionally declined to load."""
        return self.init_error is not None and sentinel in self.init_error.message

    def failed(self, sentinel: str = SKIP_PLUGIN) -> bool:
        """True if the plugin reported an init error that is not a skip."""
        return self.init_error is not None and not self.skipped(sentinel)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Plugin:
        """
        Build a Plugin from its wire form.

        Example:
            Plugin.from_dict({"type": "io.snapshotter.v1", "id": "zfs",
                              "init_err": {"message": "skip plugin: no zfs"}})
        """
        init_err = data.get("init_err")
        return cls(
            type=str(data["type"]),
            id=str(data["id"]),
            init_error=InitError(str(init_err.get("message", ""))) if init_err else None,
        )


class DaemonClient(Protocol):
    """
    Client connected to a daemon's health endpoint.

    Implementations raise the builtin ConnectionError (or a subclass) when the
    endpoint cannot be reached at all, so callers can tell "nothing listening"
    apart from "listening but not serving".
    """

    def is_serving(self, timeout: float | None = None) -> bool: ...

    def plugins(self, timeout: float | None = None) -> list[Plugin]: ...

    def close(self) -> None: ...


Connector = Callable[[str], DaemonClient]
