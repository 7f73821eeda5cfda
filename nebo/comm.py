"""Comm capability: inter-agent communication for Nebo."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .bridge import Bridge, ConfigureCallback
from .env import AppEnv


@dataclass
class CommMessage:
    """An inter-agent communication message."""

    id: str = ""
    from_: str = ""
    to: str = ""
    topic: str = ""
    conversation_id: str = ""
    type: str = ""  # "message", "mention", "proposal", "command", "info" or "task"
    content: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    timestamp: int = 0
    human_injected: bool = False
    human_id: str = ""

    def to_wire(self) -> dict[str, Any]:
        """Return the message as a dict keyed by wire field names."""
        return {
            "id": self.id,
            "from": self.from_,
            "to": self.to,
            "topic": self.topic,
            "conversation_id": self.conversation_id,
            "type": self.type,
            "content": self.content,
            "metadata": dict(self.metadata),
            "timestamp": self.timestamp,
            "human_injected": self.human_injected,
            "human_id": self.human_id,
        }

    @classmethod
    def from_wire(cls, data: Mapping[str, Any] | None) -> CommMessage:
        """Build a message from wire fields; ``None`` gives an empty message."""
        if data is None:
            return cls()
        return cls(
            id=data.get("id", ""),
            from_=data.get("from", ""),
            to=data.get("to", ""),
            topic=data.get("topic", ""),
            conversation_id=data.get("conversation_id", ""),
            type=data.get("type", ""),
            content=data.get("content", ""),
            metadata=dict(data.get("metadata") or {}),
            timestamp=data.get("timestamp", 0),
            human_injected=data.get("human_injected", False),
            human_id=data.get("human_id", ""),
        )


class CommHandler(ABC):
    """Interface for apps that provide inter-agent communication."""

    @abstractmethod
    def name(self) -> str:
        """Return the transport's name."""

    @abstractmethod
    def version(self) -> str:
        """Return the transport's version."""

    @abstractmethod
    def connect(self, config: dict[str, str]) -> None:
        """Connect; raise on failure."""

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect; raise on failure."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the transport is connected."""

    @abstractmethod
    def send(self, message: CommMessage) -> None:
        """Send a message; raise on failure."""

    @abstractmethod
    def subscribe(self, topic: str) -> None:
        """Subscribe to a topic; raise on failure."""

    @abstractmethod
    def unsubscribe(self, topic: str) -> None:
        """Unsubscribe from a topic; raise on failure."""

    @abstractmethod
    def register(self, agent_id: str, capabilities: list[str]) -> None:
        """Register this agent with its capabilities; raise on failure."""

    @abstractmethod
    def deregister(self) -> None:
        """Deregister this agent; raise on failure."""

    @abstractmethod
    def receive(self) -> Iterable[CommMessage]:
        """Return the stream of incoming messages."""


def _outcome(call: Callable[[], Any]) -> dict[str, Any]:
    try:
        call()
    except Exception as exc:  # handler failures are reported in the response
        return {"error": str(exc)}
    return {}


class CommBridge(Bridge):
    """Exposes a :class:`CommHandler` as the comm service."""

    def __init__(
        self,
        handler: CommHandler,
        env: AppEnv,
        on_configure: ConfigureCallback | None = None,
    ) -> None:
        super().__init__(env, on_configure)
        self.handler = handler

    def name(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return the transport's name."""
        return {"name": self.handler.name()}

    def version(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return the transport's version."""
        return {"version": self.handler.version()}

    def connect(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Connect the handler with the given config."""
        config = dict((request or {}).get("config") or {})
        return _outcome(lambda: self.handler.connect(config))

    def disconnect(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Disconnect the handler."""
        return _outcome(self.handler.disconnect)

    def is_connected(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Report whether the handler is connected."""
        return {"connected": bool(self.handler.is_connected())}

    def send(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Send the request's message through the handler."""
        message = CommMessage.from_wire((request or {}).get("message"))
        return _outcome(lambda: self.handler.send(message))

    def subscribe(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Subscribe the handler to the request's topic."""
        topic = (request or {}).get("topic", "")
        return _outcome(lambda: self.handler.subscribe(topic))

    def unsubscribe(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Unsubscribe the handler from the request's topic."""
        topic = (request or {}).get("topic", "")
        return _outcome(lambda: self.handler.unsubscribe(topic))

    def register(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Register the agent named in the request."""
        request = request or {}
        agent_id = request.get("agent_id", "")
        capabilities = list(request.get("capabilities") or ())
        return _outcome(lambda: self.handler.register(agent_id, capabilities))

    def deregister(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Deregister the agent."""
        return _outcome(self.handler.deregister)

    def receive(self, request: Mapping[str, Any] | None, context: Any) -> Iterator[dict[str, Any]]:
        """Stream incoming messages until the handler ends or the caller goes away."""
        for message in self.handler.receive():
            if context is not None and not context.is_active():
                return
            yield message.to_wire()