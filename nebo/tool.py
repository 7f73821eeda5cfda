"""Tool capability: gives Nebo's agent a new tool."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from .bridge import Bridge, ConfigureCallback
from .env import AppEnv


class ToolHandler(ABC):
    """Interface for apps that provide a tool to the agent."""

    @abstractmethod
    def name(self) -> str:
        """Return the tool's name."""

    @abstractmethod
    def description(self) -> str:
        """Return a description of what the tool does."""

    @abstractmethod
    def schema(self) -> bytes:
        """Return the JSON Schema of the tool's input."""

    @abstractmethod
    def execute(self, input: bytes) -> str:
        """Run the tool on JSON *input*; raise to report a failure."""

    def requires_approval(self) -> bool:
        """Whether the user must confirm each call; tools may override."""
        return False


class ToolBridge(Bridge):
    """Exposes a :class:`ToolHandler` as the tool service."""

    def __init__(
        self,
        handler: ToolHandler,
        env: AppEnv,
        on_configure: ConfigureCallback | None = None,
    ) -> None:
        super().__init__(env, on_configure)
        self.handler = handler

    def name(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return the tool's name."""
        return {"name": self.handler.name()}

    def description(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return the tool's description."""
        return {"description": self.handler.description()}

    def schema(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return the tool's input schema."""
        return {"schema": self.handler.schema()}

    def execute(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Run the tool; a raised error becomes content flagged as an error."""
        payload = (request or {}).get("input") or b""
        try:
            content = self.handler.execute(payload)
        except Exception as exc:  # handler failures are reported to the caller
            return {"content": str(exc), "is_error": True}
        return {"content": content, "is_error": False}

    def requires_approval(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Report whether the tool needs user confirmation."""
        check = getattr(self.handler, "requires_approval", None)
        needed = bool(check()) if callable(check) else False
        return {"requires_approval": needed}