"""The app runtime: capability registration and the service on the Unix socket."""

from __future__ import annotations

import base64
import json
import os
import signal
import sys
import threading
from collections.abc import Callable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager, suppress
from typing import Any

import grpc

from .bridge import Bridge, ConfigureCallback
from .channel import ChannelBridge, ChannelHandler
from .comm import CommBridge, CommHandler
from .env import AppEnv, load_env
from .errors import NeboError, NoHandlersError, NoSockPathError
from .gateway import GatewayBridge, GatewayHandler
from .schedule import ScheduleBridge, ScheduleHandler
from .tool import ToolBridge, ToolHandler
from .ui import HandlerFunc, ServeMux, UIBridge

_SERVICE_PREFIX = "apps.v0."
_SHUTDOWN_GRACE = 30.0
_MAX_WORKERS = 16

_COMMON_METHODS = (("HealthCheck", "health_check"), ("Configure", "configure"))

_UNARY_METHODS: dict[str, tuple[tuple[str, str], ...]] = {
    "ToolService": (
        ("Name", "name"),
        ("Description", "description"),
        ("Schema", "schema"),
        ("Execute", "execute"),
        ("RequiresApproval", "requires_approval"),
    ),
    "ChannelService": (
        ("ID", "id"),
        ("Connect", "connect"),
        ("Disconnect", "disconnect"),
        ("Send", "send"),
    ),
    "CommService": (
        ("Name", "name"),
        ("Version", "version"),
        ("Connect", "connect"),
        ("Disconnect", "disconnect"),
        ("IsConnected", "is_connected"),
        ("Send", "send"),
        ("Subscribe", "subscribe"),
        ("Unsubscribe", "unsubscribe"),
        ("Register", "register"),
        ("Deregister", "deregister"),
    ),
    "GatewayService": (("Cancel", "cancel"), ("Poll", "poll")),
    "ScheduleService": (
        ("Create", "create"),
        ("Get", "get"),
        ("List", "list"),
        ("Update", "update"),
        ("Delete", "delete"),
        ("Enable", "enable"),
        ("Disable", "disable"),
        ("Trigger", "trigger"),
        ("History", "history"),
    ),
    "UIService": (("HandleRequest", "handle_request"),),
}

_STREAM_METHODS: dict[str, tuple[tuple[str, str], ...]] = {
    "ChannelService": (("Receive", "receive"),),
    "CommService": (("Receive", "receive"),),
    "GatewayService": (("Stream", "stream"),),
    "ScheduleService": (("Triggers", "triggers"),),
}


def _encode_extra(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {"$bytes": base64.b64encode(bytes(value)).decode("ascii")}
    raise TypeError(f"cannot encode {type(value).__name__}")


def _decode_object(obj: dict[str, Any]) -> Any:
    if obj.keys() == {"$bytes"}:
        return base64.b64decode(obj["$bytes"])
    return obj


def _serialize(message: Any) -> bytes:
    return json.dumps(message, default=_encode_extra, separators=(",", ":")).encode("utf-8")


def _deserialize(data: bytes) -> Any:
    if not data:
        return {}
    return json.loads(data, object_hook=_decode_object)


def _unary(method: Callable[[Any], Any]) -> Callable[[Any, grpc.ServicerContext], Any]:
    def call(request: Any, context: grpc.ServicerContext) -> Any:
        try:
            return method(request)
        except NotImplementedError as exc:
            context.abort(grpc.StatusCode.UNIMPLEMENTED, str(exc))
        except NeboError as exc:
            context.abort(grpc.StatusCode.INTERNAL, str(exc))

    return call


def _generic_handler(service: str, bridge: Bridge) -> grpc.GenericRpcHandler:
    handlers: dict[str, grpc.RpcMethodHandler] = {}
    for wire_name, attr in (*_COMMON_METHODS, *_UNARY_METHODS.get(service, ())):
        handlers[wire_name] = grpc.unary_unary_rpc_method_handler(
            _unary(getattr(bridge, attr)),
            request_deserializer=_deserialize,
            response_serializer=_serialize,
        )
    for wire_name, attr in _STREAM_METHODS.get(service, ()):
        handlers[wire_name] = grpc.unary_stream_rpc_method_handler(
            getattr(bridge, attr),
            request_deserializer=_deserialize,
            response_serializer=_serialize,
        )
    return grpc.method_handlers_generic_handler(_SERVICE_PREFIX + service, handlers)


@contextmanager
def _shutdown_on_signals(server: grpc.Server) -> Iterator[None]:
    """Stop *server* gracefully on SIGTERM or SIGINT while the block runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def stop(signum: int, frame: Any) -> None:
        server.stop(_SHUTDOWN_GRACE)

    signums = (signal.SIGTERM, signal.SIGINT)
    previous = {signum: signal.signal(signum, stop) for signum in signums}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


class App:
    """A Nebo app: registers capability handlers and serves them on a Unix socket."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        env = load_env(environ)
        if not env.sock_path:
            raise NoSockPathError()
        self._env = env
        self._on_configure: ConfigureCallback | None = None
        self._services: dict[str, Bridge] = {}
        self._mux: ServeMux | None = None
        self._has_handlers = False

    @property
    def env(self) -> AppEnv:
        """The settings the app was launched with."""
        return self._env

    @property
    def services(self) -> dict[str, Bridge]:
        """The capability services registered so far, by service name."""
        return dict(self._services)

    def on_configure(self, fn: ConfigureCallback | None) -> None:
        """Set the callback for settings pushed by Nebo; handlers registered later use it."""
        self._on_configure = fn

    def _register(self, service: str, bridge: Bridge) -> None:
        if service in self._services:
            raise ValueError(f"duplicate service registration for {_SERVICE_PREFIX}{service}")
        self._services[service] = bridge
        self._has_handlers = True

    def register_tool(self, handler: ToolHandler) -> None:
        """Register a tool capability."""
        self._register("ToolService", ToolBridge(handler, self._env, self._on_configure))

    def register_channel(self, handler: ChannelHandler) -> None:
        """Register a channel capability."""
        self._register("ChannelService", ChannelBridge(handler, self._env, self._on_configure))

    def register_gateway(self, handler: GatewayHandler) -> None:
        """Register a gateway capability."""
        self._register("GatewayService", GatewayBridge(handler, self._env, self._on_configure))

    def register_comm(self, handler: CommHandler) -> None:
        """Register a comm capability."""
        self._register("CommService", CommBridge(handler, self._env, self._on_configure))

    def register_schedule(self, handler: ScheduleHandler) -> None:
        """Register a schedule capability."""
        self._register("ScheduleService", ScheduleBridge(handler, self._env, self._on_configure))

    def _router(self) -> ServeMux:
        if self._mux is None:
            self._mux = ServeMux()
        return self._mux

    def handle_func(self, pattern: str, handler: HandlerFunc) -> None:
        """Register an HTTP handler function for *pattern*."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._router().handle(pattern, handler)
        self._has_handlers = True

    def handle(self, pattern: str, handler: Any) -> None:
        """Register an HTTP handler: a callable or any object with a ``dispatch`` method."""
        target = getattr(handler, "dispatch", None)
        if not callable(target):
            target = handler
        if not callable(target):
            raise TypeError("handler must be callable or have a dispatch method")
        self._router().handle(pattern, target)
        self._has_handlers = True

    def run(self) -> None:
        """Serve on the app's socket until SIGTERM or SIGINT."""
        if not self._has_handlers:
            raise NoHandlersError()

        services = dict(self._services)
        if self._mux is not None:
            services["UIService"] = UIBridge(self._mux, self._env, self._on_configure)

        server = grpc.server(ThreadPoolExecutor(max_workers=_MAX_WORKERS))
        server.add_generic_rpc_handlers(
            tuple(_generic_handler(name, bridge) for name, bridge in services.items())
        )

        path = self._env.sock_path
        with suppress(OSError):
            os.remove(path)

        try:
            port = server.add_insecure_port(f"unix:{path}")
        except RuntimeError as exc:
            raise NeboError(f"listen on {path}: {exc}") from exc
        if port == 0:
            raise NeboError(f"listen on {path}: failed to bind")

        with _shutdown_on_signals(server):
            server.start()
            print(f"[{self._env.name}] listening on {path}", file=sys.stderr)
            server.wait_for_termination()