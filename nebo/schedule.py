"""Schedule capability: replaces Nebo's built-in cron scheduler.

Schedules, triggers and history entries are plain dicts keyed by wire field names.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from .bridge import Bridge, ConfigureCallback
from .env import AppEnv

Schedule = dict[str, Any]
ScheduleTrigger = dict[str, Any]
ScheduleHistoryEntry = dict[str, Any]


class ScheduleHandler(ABC):
    """Interface for apps that run scheduled tasks."""

    @abstractmethod
    def create(self, request: Mapping[str, Any]) -> Schedule:
        """Create a schedule from the request."""

    @abstractmethod
    def get(self, name: str) -> Schedule:
        """Return the named schedule."""

    @abstractmethod
    def list(self, limit: int, offset: int, enabled_only: bool) -> tuple[list[Schedule], int]:
        """Return a page of schedules and the total count."""

    @abstractmethod
    def update(self, request: Mapping[str, Any]) -> Schedule:
        """Update a schedule from the request."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Delete the named schedule."""

    @abstractmethod
    def enable(self, name: str) -> Schedule:
        """Enable the named schedule."""

    @abstractmethod
    def disable(self, name: str) -> Schedule:
        """Disable the named schedule."""

    @abstractmethod
    def trigger(self, name: str) -> tuple[bool, str]:
        """Run the named schedule now; return success and output."""

    @abstractmethod
    def history(self, name: str, limit: int, offset: int) -> tuple[list[ScheduleHistoryEntry], int]:
        """Return a page of executions and the total count."""

    @abstractmethod
    def triggers(self) -> Iterable[ScheduleTrigger]:
        """Return the stream of fired schedules."""


class ScheduleBridge(Bridge):
    """Exposes a :class:`ScheduleHandler` as the schedule service."""

    def __init__(
        self,
        handler: ScheduleHandler,
        env: AppEnv,
        on_configure: ConfigureCallback | None = None,
    ) -> None:
        super().__init__(env, on_configure)
        self.handler = handler

    @staticmethod
    def _schedule(call: Callable[[], Schedule]) -> dict[str, Any]:
        try:
            return {"schedule": call()}
        except Exception as exc:  # handler failures are reported in the response
            return {"error": str(exc)}

    def create(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Create a schedule."""
        return self._schedule(lambda: self.handler.create(request or {}))

    def get(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Fetch a schedule by name."""
        name = (request or {}).get("name", "")
        return self._schedule(lambda: self.handler.get(name))

    def list(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """List schedules; a failure gives an empty page."""
        request = request or {}
        try:
            schedules, total = self.handler.list(
                request.get("limit", 0), request.get("offset", 0), request.get("enabled_only", False)
            )
        except Exception:  # the service reports an empty listing
            return {"schedules": [], "total": 0}
        return {"schedules": list(schedules), "total": total}

    def update(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Update a schedule."""
        return self._schedule(lambda: self.handler.update(request or {}))

    def delete(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Delete a schedule by name."""
        try:
            self.handler.delete((request or {}).get("name", ""))
        except Exception as exc:  # handler failures are reported in the response
            return {"error": str(exc)}
        return {"success": True}

    def enable(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Enable a schedule by name."""
        name = (request or {}).get("name", "")
        return self._schedule(lambda: self.handler.enable(name))

    def disable(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Disable a schedule by name."""
        name = (request or {}).get("name", "")
        return self._schedule(lambda: self.handler.disable(name))

    def trigger(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Run a schedule now."""
        try:
            success, output = self.handler.trigger((request or {}).get("name", ""))
        except Exception as exc:  # handler failures are reported in the response
            return {"error": str(exc)}
        return {"success": success, "output": output}

    def history(self, request: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return execution history; a failure gives an empty page."""
        request = request or {}
        try:
            entries, total = self.handler.history(
                request.get("name", ""), request.get("limit", 0), request.get("offset", 0)
            )
        except Exception:  # the service reports an empty history
            return {"entries": [], "total": 0}
        return {"entries": list(entries), "total": total}

    def triggers(self, request: Mapping[str, Any] | None, context: Any) -> Iterator[ScheduleTrigger]:
        """Stream fired schedules until the handler ends or the caller goes away."""
        for trigger in self.handler.triggers():
            if context is not None and not context.is_active():
                return
            yield trigger