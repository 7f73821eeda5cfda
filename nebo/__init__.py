"""SDK for building Nebo apps: capability handlers served over gRPC on a Unix socket."""

__version__ = "0.1.0"