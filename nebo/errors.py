"""Exceptions raised by the app runtime."""


class NeboError(Exception):
    """Base class for errors raised by the app runtime."""


class NoSockPathError(NeboError):
    """Raised when NEBO_APP_SOCK is not set."""

    def __init__(self, message: str = "NEBO_APP_SOCK environment variable is not set") -> None:
        super().__init__(message)


class NoHandlersError(NeboError):
    """Raised when the app is started with no capability handlers registered."""

    def __init__(
        self,
        message: str = (
            "no capability handlers registered — "
            "register at least one handler before calling Run()"
        ),
    ) -> None:
        super().__init__(message)