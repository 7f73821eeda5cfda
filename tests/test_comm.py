import pytest

from nebo.comm import CommBridge, CommHandler, CommMessage
from nebo.env import AppEnv


class FakeComm(CommHandler):
    def __init__(self, inbound=(), fail=False):
        self.inbound = list(inbound)
        self.fail = fail
        self.calls = []
        self.connected = False

    def _record(self, *call):
        if self.fail:
            raise RuntimeError(call[0] + " failed")
        self.calls.append(call)

    def name(self):
        return "fake-comm"

    def version(self):
        return "9.9"

    def connect(self, config):
        self._record("connect", config)
        self.connected = True

    def disconnect(self):
        self._record("disconnect")

    def is_connected(self):
        return self.connected

    def send(self, message):
        self._record("send", message)

    def subscribe(self, topic):
        self._record("subscribe", topic)

    def unsubscribe(self, topic):
        self._record("unsubscribe", topic)

    def register(self, agent_id, capabilities):
        self._record("register", agent_id, capabilities)

    def deregister(self):
        self._record("deregister")

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


SAMPLE = CommMessage(
    id="1",
    from_="agent-a",
    to="agent-b",
    topic="ops",
    conversation_id="conv",
    type="task",
    content="do it",
    metadata={"k": "v"},
    timestamp=1700000000,
    human_injected=True,
    human_id="h1",
)


@pytest.fixture
def env():
    return AppEnv(name="Comm", version="1.0")


def test_wire_round_trip():
    assert CommMessage.from_wire(SAMPLE.to_wire()) == SAMPLE


def test_wire_field_names():
    wire = SAMPLE.to_wire()
    assert wire["from"] == "agent-a"
    assert wire["conversation_id"] == "conv"
    assert wire["human_injected"] is True


def test_from_wire_none_is_empty():
    assert CommMessage.from_wire(None) == CommMessage()


def test_name_version(env):
    bridge = CommBridge(FakeComm(), env)
    assert bridge.name({}) == {"name": "fake-comm"}
    assert bridge.version({}) == {"version": "9.9"}


def test_connect_and_is_connected(env):
    handler = FakeComm()
    bridge = CommBridge(handler, env)
    assert bridge.is_connected({}) == {"connected": False}
    assert bridge.connect({"config": {"url": "wss://example.com"}}) == {}
    assert bridge.is_connected({}) == {"connected": True}
    assert handler.calls == [("connect", {"url": "wss://example.com"})]


def test_send_converts_message(env):
    handler = FakeComm()
    assert CommBridge(handler, env).send({"message": SAMPLE.to_wire()}) == {}
    assert handler.calls == [("send", SAMPLE)]


def test_send_without_message_sends_empty(env):
    handler = FakeComm()
    CommBridge(handler, env).send({})
    assert handler.calls == [("send", CommMessage())]


def test_topic_and_registration_calls(env):
    handler = FakeComm()
    bridge = CommBridge(handler, env)
    bridge.subscribe({"topic": "ops"})
    bridge.unsubscribe({"topic": "ops"})
    bridge.register({"agent_id": "a1", "capabilities": ["x", "y"]})
    bridge.deregister({})
    bridge.disconnect({})
    assert handler.calls == [
        ("subscribe", "ops"),
        ("unsubscribe", "ops"),
        ("register", "a1", ["x", "y"]),
        ("deregister",),
        ("disconnect",),
    ]


@pytest.mark.parametrize(
    "method, request_, name",
    [
        ("connect", {"config": {}}, "connect"),
        ("disconnect", {}, "disconnect"),
        ("send", {"message": {}}, "send"),
        ("subscribe", {"topic": "t"}, "subscribe"),
        ("unsubscribe", {"topic": "t"}, "unsubscribe"),
        ("register", {"agent_id": "a"}, "register"),
        ("deregister", {}, "deregister"),
    ],
)
def test_errors_reported_in_response(env, method, request_, name):
    bridge = CommBridge(FakeComm(fail=True), env)
    assert getattr(bridge, method)(request_) == {"error": name + " failed"}


def test_receive_streams_wire_messages(env):
    out = list(CommBridge(FakeComm([SAMPLE, CommMessage(id="2")]), env).receive({}, Context(5)))
    assert out == [SAMPLE.to_wire(), CommMessage(id="2").to_wire()]


def test_receive_stops_when_context_inactive(env):
    out = list(CommBridge(FakeComm([SAMPLE, SAMPLE, SAMPLE]), env).receive({}, Context(1)))
    assert len(out) == 1


def test_receive_error_propagates(env):
    with pytest.raises(RuntimeError, match="receive failed"):
        list(CommBridge(FakeComm(fail=True), env).receive({}, None))


def test_configure_callback(env):
    seen = []
    CommBridge(FakeComm(), env, seen.append).configure({"values": {"a": "1"}})
    assert seen == [{"a": "1"}]