"""Gateway capability: routes LLM chat completions for Nebo."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .bridge import Bridge, ConfigureCallback
from .env import AppEnv


@dataclass
class GatewayMessage:
    """A single message in a conversation."""

    role: str = ""
    content: str = ""
    tool_call_id: str = ""
    tool_calls: str = ""  # JSON-encoded array


@dataclass
class GatewayToolDef:
    """A tool available to the model."""

    name: str = ""
    description: str = ""
    input_schema: bytes = b""  # JSON Schema


@dataclass
class GatewayRequest:
    """A chat completion request from Nebo."""

    request_id: str = ""
    messages: list[GatewayMessage] = field(default_factory=list)
    tools: list[GatewayToolDef] = field(default_factory=list)
    max_tokens: int = 0
    temperature: float = 0.0
    system: str = ""
    user_id: str = ""
    user_plan: str = ""
    user_token: str = ""  # only set when the app holds the "user:token" permission


@dataclass
class GatewayEvent:
    """A streamed event sent back to Nebo."""

    type: str = ""  # "text", "tool_call", "thinking", "error" or "done"
    content: str = ""
    model: str = ""
    request_id: str = ""

    def to_wire(self) -> dict[str, Any]:
        """Return the event keyed by wire field names."""
        return {
            "type": self.type,
            "content": self.content,
            "model": self.model,
            "request_id": self.request_id,
        }


class GatewayHandler(ABC):
    """Interface for apps that route model requests."""

    @abstractmethod
    def stream(self, request: GatewayRequest) -> Iterable[GatewayEvent]:
        """Start a completion and return its events; raise on failure."""

    @abstractmethod
    def cancel(self, request_id: str) -> None:
        """Cancel a running completion; raise on failure."""


def _request_from_wire(data: Mapping[str, Any]) -> GatewayRequest:
    request = GatewayRequest(
        request_id=data.get("request_id", ""),
        max_tokens=data.get("max_tokens", 0),
        temperature=data.get("temperature", 0.0),
        system=data.get("system", ""),
    )
    user = data.get("user")
    if user is not None:
        request.user_id = user.get("user_id", "")
        request.user_plan = user.get("plan", "")
        request.user_token = user.get("token", "")
    request.messages = [
        GatewayMessage(
            role=m.get("role", ""),
            content=m.get("content", ""),
            tool_call_id=m.get("tool_call_id", ""),
            tool_calls=m.get("tool_calls", ""),
        )
        for m in data.get("messages") or ()
    ]
    request.tools = [
        GatewayToolDef(
            name=t.get("name", ""),
            description=t.get("description", ""),
            input_schema=t.get("input_schema") or b"",
        )
        for t in data.get("tools") or ()
    ]
    return request


class GatewayBridge(Bridge):
    """Exposes a :class:`GatewayHandler` as the gateway service."""

    def __init__(
        self,
        handler: GatewayHandler,
        env: AppEnv,
        on_configure: ConfigureCallback | None = None,
    ) -> None:
        super().__init__(env, on_configure)
        self.handler = handler

    def stream(self, request: Mapping[str, Any] | None, context: Any) -> Iterator[dict[str, Any]]:
        """Stream the handler's events until it ends or the caller goes away."""
        events = self.handler.stream(_request_from_wire(request or {}))
        for event in events:
            if context is not None and not context.is_active():
                return
            yield event.to_wire()

    def cancel(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Cancel a completion; failure is reported as not cancelled."""
        try:
            self.handler.cancel((request or {}).get("request_id", ""))
        except Exception:  # the service reports only whether it worked
            return {"cancelled": False}
        return {"cancelled": True}

    def poll(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Polling is not used; return an empty response."""
        return {}