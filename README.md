# nebo

An SDK for writing Nebo apps in Python.

A Nebo app is a process that Nebo launches inside its sandbox and talks to over
gRPC on a Unix socket. This package runs the gRPC server, stops it gracefully
on `SIGTERM`/`SIGINT`, and connects the services to plain Python handler
objects. You implement the handlers for the capabilities your app provides:

| Capability | Handler (module)                    | Register with                   |
|------------|-------------------------------------|---------------------------------|
| Tool       | `ToolHandler` (`nebo.tool`)         | `App.register_tool`             |
| Channel    | `ChannelHandler` (`nebo.channel`)   | `App.register_channel`          |
| Gateway    | `GatewayHandler` (`nebo.gateway`)   | `App.register_gateway`          |
| Comm       | `CommHandler` (`nebo.comm`)         | `App.register_comm`             |
| Schedule   | `ScheduleHandler` (`nebo.schedule`) | `App.register_schedule`         |
| HTTP / UI  | a request handler (`nebo.ui`)       | `App.handle_func`, `App.handle` |

Each capability may be registered once; registering the same one twice raises
`ValueError`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Environment

Nebo sets these variables when it starts your app. `nebo.env.load_env(environ=None)`
reads them (from the process environment, or from the mapping you pass) into a
frozen `AppEnv`; unset variables become empty strings.

| Variable           | `AppEnv` field | Meaning                           |
|--------------------|----------------|-----------------------------------|
| `NEBO_APP_DIR`     | `dir`          | the app's installation directory  |
| `NEBO_APP_SOCK`    | `sock_path`    | the Unix socket path to listen on |
| `NEBO_APP_ID`      | `id`           | the app ID from the manifest      |
| `NEBO_APP_NAME`    | `name`         | the app name from the manifest    |
| `NEBO_APP_VERSION` | `version`      | the app version from the manifest |
| `NEBO_APP_DATA`    | `data_dir`     | the app's data directory          |

`nebo.app.App(environ=None)` loads these settings and exposes them as `App.env`.
Creating an `App` without `NEBO_APP_SOCK` raises `nebo.errors.NoSockPathError`;
calling `App.run()` before registering any handler raises
`nebo.errors.NoHandlersError`. Both derive from `nebo.errors.NeboError`, as
does the error raised when the socket cannot be bound.

`App.run()` removes any stale file at the socket path, listens there, prints
`[<name>] listening on <path>` to stderr and blocks until the server stops.
When called from the main thread it installs `SIGTERM` and `SIGINT` handlers
that stop the server gracefully, and restores the previous handlers afterwards.

## Writing a tool

Subclass `nebo.tool.ToolHandler` and implement `name`, `description`, `schema`
(JSON Schema bytes) and `execute`, which receives the raw JSON input as bytes
and returns text. An exception raised from `execute` is reported back to Nebo
as an error result carrying the exception's message. Override
`requires_approval` to return `True` if every call needs user confirmation.

`nebo.schema.new_schema(*actions)` builds schemas in the "action + parameters"
style: the action names become an enum on a required `action` property, and
each builder call adds one parameter.

```python
import json

from nebo.app import App
from nebo.schema import new_schema
from nebo.tool import ToolHandler


class Greeter(ToolHandler):
    def name(self):
        return "greeter"

    def description(self):
        return "Greets people."

    def schema(self):
        return (
            new_schema("hello", "goodbye")
            .string("who", "Person to greet", True)
            .bool("shout", "Use capitals", False)
            .build()
        )

    def execute(self, input):
        args = json.loads(input)
        text = f"{args['action']}, {args['who']}"
        return text.upper() if args.get("shout") else text


app = App()
app.register_tool(Greeter())
app.run()
```

`SchemaBuilder` offers `string`, `number`, `bool`, `enum` and `object`, each
taking a name, a description and whether the parameter is required; `enum`
takes its allowed values after that. `build()` returns compact JSON as bytes,
with keys sorted and `required` listing `action` first, then the required
parameters in the order they were added.

## Other capabilities

- **Channel** (`nebo.channel`): messages are `ChannelEnvelope` dataclasses with
  a `MessageSender`, `Attachment`s and `MessageAction`s. `send` returns the
  platform message id; `receive` returns an iterable of inbound envelopes that
  is streamed to Nebo.
- **Comm** (`nebo.comm`): inter-agent `CommMessage`s, with `to_wire` and
  `from_wire` to convert to and from wire fields. The handler covers connect,
  subscribe, register and a `receive` stream.
- **Gateway** (`nebo.gateway`): `stream` receives a `GatewayRequest` (messages,
  tools, limits and user details) and returns an iterable of `GatewayEvent`s.
  A failing `cancel` is reported as not cancelled.
- **Schedule** (`nebo.schedule`): schedules, triggers and history entries are
  plain dicts. A failing `list` or `history` is reported as an empty page; other
  failures are reported through the response's `error` field.

For connect-style calls, an exception raised by the handler is returned to Nebo
as the response's `error` message rather than failing the call. Streams stop
when the handler's iterable ends or when the caller goes away.

## Settings updates

Call `App.on_configure` before registering handlers: each handler captures the
callback that is set when it is registered. The callback receives a
`dict[str, str]` whenever Nebo pushes new settings.

```python
app.on_configure(lambda settings: print("new settings:", settings))
```

## Serving HTTP to the app's UI

Requests the browser makes to the app's API are proxied to it. Register
handlers with `App.handle_func(pattern, fn)`, where `fn` takes a
`nebo.ui.HttpRequest` and returns a `nebo.ui.HttpResponse`, or with
`App.handle(pattern, handler)`, which also accepts any object with a
`dispatch` method (such as another `ServeMux`).

Patterns are handled by `nebo.ui.ServeMux`: a path, optionally preceded by a
method and a space (`"GET /items"`). A path ending in `/` matches everything
below it, and the longest match wins. Unmatched paths get a `404`; a path that
matches only under other methods gets a `405` with an `Allow` header; a `GET`
route also serves `HEAD`. Header names are put in canonical form, so
`HttpRequest.header("content-type")` finds `Content-Type`.

## Example: the calculator

The package ships a calculator tool, `nebo.calculator.Calculator`, that
supports `add`, `subtract`, `multiply` and `divide` on operands `a` and `b` and
answers in the form `6 divide 3 = 2`. Dividing by zero or an unknown action is
reported as an error. Run it as a Nebo app with:

```
nebo-calculator
```

It listens on the socket named by `NEBO_APP_SOCK`, stops cleanly on `SIGTERM`
or `SIGINT`, and exits with status 1 after printing the message if the
environment is missing or the socket cannot be bound.

## What this package does not do

The services are registered by name (`apps.v0.ToolService`,
`apps.v0.ChannelService` and so on), but the package carries no compiled
Protocol Buffers definitions. Requests and responses are plain dicts keyed by
wire field names and are encoded on the wire as JSON, with byte fields written
as `{"$bytes": "<base64>"}`. A Nebo host that expects Protocol Buffers
messages on these services will not understand them without a matching
encoding.