import pytest

from nebo.channel import (
    Attachment,
    ChannelBridge,
    ChannelEnvelope,
    ChannelHandler,
    MessageAction,
    MessageSender,
)
from nebo.env import AppEnv


class FakeChannel(ChannelHandler):
    def __init__(self, inbound=(), fail=False):
        self.inbound = list(inbound)
        self.fail = fail
        self.sent = []
        self.config = None
        self.disconnected = False

    def id(self):
        return "fake"

    def connect(self, config):
        if self.fail:
            raise RuntimeError("connect refused")
        self.config = config

    def disconnect(self):
        if self.fail:
            raise RuntimeError("not connected")
        self.disconnected = True

    def send(self, envelope):
        if self.fail:
            raise RuntimeError("send failed")
        self.sent.append(envelope)
        return "msg-" + envelope.text

    def receive(self):
        if self.fail:
            raise RuntimeError("receive failed")
        return iter(self.inbound)


class Context:
    def __init__(self, active_calls):
        self.remaining = active_calls

    def is_active(self):
        self.remaining -= 1
        return self.remaining >= 0


@pytest.fixture
def env():
    return AppEnv(name="Chan", version="2.0")


def test_id(env):
    assert ChannelBridge(FakeChannel(), env).id({}) == {"id": "fake"}


def test_connect_passes_config(env):
    handler = FakeChannel()
    assert ChannelBridge(handler, env).connect({"config": {"token": "token"}}) == {}
    assert handler.config == {"token": "token"}


def test_connect_and_disconnect_errors(env):
    bridge = ChannelBridge(FakeChannel(fail=True), env)
    assert bridge.connect({"config": {}}) == {"error": "connect refused"}
    assert bridge.disconnect({}) == {"error": "not connected"}


def test_disconnect_success(env):
    handler = FakeChannel()
    assert ChannelBridge(handler, env).disconnect({}) == {}
    assert handler.disconnected is True


def test_send_converts_request(env):
    handler = FakeChannel()
    response = ChannelBridge(handler, env).send(
        {
            "channel_id": "c1",
            "text": "hi",
            "message_id": "m1",
            "reply_to": "m0",
            "platform_data": b"raw",
            "sender": {"name": "Ann", "role": "Friend", "bot_id": "bot-1"},
            "attachments": [{"type": "image", "url": "https://example.com/a.png", "filename": "a.png", "size": 10}],
            "actions": [{"label": "OK", "callback_id": "cb"}],
        }
    )
    assert response == {"message_id": "msg-hi"}
    assert handler.sent == [
        ChannelEnvelope(
            message_id="m1",
            channel_id="c1",
            sender=MessageSender(name="Ann", role="Friend", bot_id="bot-1"),
            text="hi",
            attachments=[Attachment(type="image", url="https://example.com/a.png", filename="a.png", size=10)],
            reply_to="m0",
            actions=[MessageAction(label="OK", callback_id="cb")],
            platform_data=b"raw",
        )
    ]


def test_send_without_sender_uses_empty_sender(env):
    handler = FakeChannel()
    ChannelBridge(handler, env).send({"text": "x"})
    assert handler.sent[0].sender == MessageSender()
    assert handler.sent[0].attachments == []


def test_send_error(env):
    assert ChannelBridge(FakeChannel(fail=True), env).send({"text": "x"}) == {"error": "send failed"}


def test_receive_converts_messages(env):
    inbound = [
        ChannelEnvelope(
            channel_id="c1",
            user_id="u1",
            text="hello",
            metadata="{}",
            sender=MessageSender(name="Bob"),
            actions=[MessageAction(label="Go", callback_id="go")],
        )
    ]
    out = list(ChannelBridge(FakeChannel(inbound), env).receive({}, Context(10)))
    assert len(out) == 1
    assert out[0]["text"] == "hello"
    assert out[0]["user_id"] == "u1"
    assert out[0]["sender"] == {"name": "Bob", "role": "", "bot_id": ""}
    assert out[0]["actions"] == [{"label": "Go", "callback_id": "go"}]


def test_receive_omits_empty_sender(env):
    out = list(ChannelBridge(FakeChannel([ChannelEnvelope(text="a")]), env).receive({}, None))
    assert "sender" not in out[0]


def test_receive_stops_when_context_inactive(env):
    inbound = [ChannelEnvelope(text=str(n)) for n in range(5)]
    out = list(ChannelBridge(FakeChannel(inbound), env).receive({}, Context(2)))
    assert [m["text"] for m in out] == ["0", "1"]


def test_receive_error_propagates(env):
    with pytest.raises(RuntimeError, match="receive failed"):
        list(ChannelBridge(FakeChannel(fail=True), env).receive({}, None))


def test_configure_and_health(env):
    seen = []
    bridge = ChannelBridge(FakeChannel(), env, seen.append)
    bridge.configure({"values": {"a": "b"}})
    assert seen == [{"a": "b"}]
    assert bridge.health_check({})["name"] == "Chan"