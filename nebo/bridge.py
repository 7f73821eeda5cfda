"""Shared behaviour of the services that expose a capability handler to Nebo.

Requests and responses are plain dicts keyed by wire field names.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .env import AppEnv

ConfigureCallback = Callable[[dict[str, str]], None]


class Bridge:
    """Base for capability services: health reporting and settings pushes."""

    def __init__(self, env: AppEnv, on_configure: ConfigureCallback | None = None) -> None:
        self.env = env
        self.on_configure = on_configure

    def health_check(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Report the app as healthy, with its name and version."""
        return {"healthy": True, "name": self.env.name, "version": self.env.version}

    def configure(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Pass pushed settings to the configure callback, if one is set."""
        if self.on_configure is not None:
            values = (request or {}).get("values") or {}
            self.on_configure(dict(values))
        return {}