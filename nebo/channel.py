"""Channel capability: bridges an external messaging platform to Nebo."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .bridge import Bridge, ConfigureCallback
from .env import AppEnv


@dataclass
class MessageSender:
    """Who sent a message."""

    name: str = ""
    role: str = ""  # relationship dynamic, such as Friend, COO or Mentor
    bot_id: str = ""


@dataclass
class Attachment:
    """A file or media attachment."""

    type: str = ""  # "image", "file", "audio" or "video"
    url: str = ""
    filename: str = ""
    size: int = 0  # bytes


@dataclass
class MessageAction:
    """An interactive element such as a button."""

    label: str = ""
    callback_id: str = ""


@dataclass
class ChannelEnvelope:
    """Message envelope used for inbound and outbound messages."""

    message_id: str = ""
    channel_id: str = ""
    sender: MessageSender = field(default_factory=MessageSender)
    text: str = ""
    attachments: list[Attachment] = field(default_factory=list)
    reply_to: str = ""
    actions: list[MessageAction] = field(default_factory=list)
    platform_data: bytes = b""
    timestamp: str = ""  # RFC 3339
    # Legacy fields, inbound only.
    user_id: str = ""
    metadata: str = ""  # JSON-encoded


class ChannelHandler(ABC):
    """Interface for apps that bridge a messaging platform."""

    @abstractmethod
    def id(self) -> str:
        """Return the channel's identifier."""

    @abstractmethod
    def connect(self, config: dict[str, str]) -> None:
        """Connect to the platform; raise on failure."""

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the platform; raise on failure."""

    @abstractmethod
    def send(self, envelope: ChannelEnvelope) -> str:
        """Send a message and return its platform message id."""

    @abstractmethod
    def receive(self) -> Iterable[ChannelEnvelope]:
        """Return the stream of inbound messages."""


def _outcome(call: Callable[[], Any]) -> dict[str, Any]:
    try:
        call()
    except Exception as exc:  # handler failures are reported in the response
        return {"error": str(exc)}
    return {}


def _sender_to_wire(sender: MessageSender) -> dict[str, Any]:
    return {"name": sender.name, "role": sender.role, "bot_id": sender.bot_id}


def _envelope_from_request(request: Mapping[str, Any]) -> ChannelEnvelope:
    envelope = ChannelEnvelope(
        channel_id=request.get("channel_id", ""),
        text=request.get("text", ""),
        message_id=request.get("message_id", ""),
        reply_to=request.get("reply_to", ""),
        platform_data=request.get("platform_data") or b"",
    )
    sender = request.get("sender")
    if sender is not None:
        envelope.sender = MessageSender(
            name=sender.get("name", ""),
            role=sender.get("role", ""),
            bot_id=sender.get("bot_id", ""),
        )
    envelope.attachments = [
        Attachment(
            type=item.get("type", ""),
            url=item.get("url", ""),
            filename=item.get("filename", ""),
            size=item.get("size", 0),
        )
        for item in request.get("attachments") or ()
    ]
    envelope.actions = [
        MessageAction(label=item.get("label", ""), callback_id=item.get("callback_id", ""))
        for item in request.get("actions") or ()
    ]
    return envelope


def _inbound_to_wire(envelope: ChannelEnvelope) -> dict[str, Any]:
    message: dict[str, Any] = {
        "channel_id": envelope.channel_id,
        "user_id": envelope.user_id,
        "text": envelope.text,
        "metadata": envelope.metadata,
        "message_id": envelope.message_id,
        "reply_to": envelope.reply_to,
        "platform_data": envelope.platform_data,
        "timestamp": envelope.timestamp,
        "attachments": [
            {"type": a.type, "url": a.url, "filename": a.filename, "size": a.size}
            for a in envelope.attachments
        ],
        "actions": [
            {"label": a.label, "callback_id": a.callback_id} for a in envelope.actions
        ],
    }
    if envelope.sender != MessageSender():
        message["sender"] = _sender_to_wire(envelope.sender)
    return message


class ChannelBridge(Bridge):
    """Exposes a :class:`ChannelHandler` as the channel service."""

    def __init__(
        self,
        handler: ChannelHandler,
        env: AppEnv,
        on_configure: ConfigureCallback | None = None,
    ) -> None:
        super().__init__(env, on_configure)
        self.handler = handler

    def id(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return the channel's identifier."""
        return {"id": self.handler.id()}

    def connect(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Connect the handler with the given config."""
        config = dict((request or {}).get("config") or {})
        return _outcome(lambda: self.handler.connect(config))

    def disconnect(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Disconnect the handler."""
        return _outcome(self.handler.disconnect)

    def send(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Send an outbound message through the handler."""
        envelope = _envelope_from_request(request or {})
        try:
            message_id = self.handler.send(envelope)
        except Exception as exc:  # handler failures are reported in the response
            return {"error": str(exc)}
        return {"message_id": message_id}

    def receive(self, request: Mapping[str, Any] | None, context: Any) -> Iterator[dict[str, Any]]:
        """Stream inbound messages until the handler ends or the caller goes away."""
        for envelope in self.handler.receive():
            if context is not None and not context.is_active():
                return
            yield _inbound_to_wire(envelope)