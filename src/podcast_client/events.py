"""Typed events exchanged between the client core and the UI layer.

The set is closed: the monitor and the submitter publish the ``Api*`` and
``Production*`` events, the UI publishes :class:`CancelRequested`.  Handlers are
registered per event type on an :class:`EventChannel` and run synchronously on
the publishing thread, so anything touching widgets must hop threads itself
(see :mod:`podcast_client.ui.event_bridge`).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Type, TypeVar

LOGGER = logging.getLogger("podcast_client.events")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ApiStatus:
    timestamp: datetime
    server_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp.isoformat(), "server_url": self.server_url}


@dataclass(frozen=True)
class ClientEvent:
    occurred_at: datetime = field(default_factory=_now, kw_only=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": type(self).__name__,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class ProductionStarted(ClientEvent):
    job_id: str

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["job_id"] = self.job_id
        return data


@dataclass(frozen=True)
class ProductionCompleted(ClientEvent):
    job_id: str
    media_uri: str

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"job_id": self.job_id, "media_uri": self.media_uri})
        return data


@dataclass(frozen=True)
class ProductionReset(ClientEvent):
    """Tells the consumer to drop any in-progress state for ``job_id``."""

    job_id: str

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["job_id"] = self.job_id
        return data


@dataclass(frozen=True)
class ApiConnected(ClientEvent):
    status: ApiStatus

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status.to_dict()
        return data


@dataclass(frozen=True)
class ApiDisconnected(ClientEvent):
    status: ApiStatus

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status.to_dict()
        return data


@dataclass(frozen=True)
class CancelRequested(ClientEvent):
    job_id: str

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["job_id"] = self.job_id
        return data


E = TypeVar("E", bound=ClientEvent)
Handler = Callable[[Any], None]


class EventChannel:
    """Thread-safe publish/subscribe hub keyed by event type.

    Subscribing to :class:`ClientEvent` receives every event.  A failing handler
    is logged and skipped; it never breaks the publisher or the other handlers.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[ClientEvent], List[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> None:
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        LOGGER.debug("Subscribed %r to %s", handler, event_type.__name__)

    def unsubscribe(self, event_type: Type[ClientEvent], handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)

    def publish(self, event: ClientEvent) -> None:
        with self._lock:
            targets = [
                handler
                for event_type, handlers in self._handlers.items()
                if isinstance(event, event_type)
                for handler in handlers
            ]
        LOGGER.debug("Publishing %s to %d handler(s)", type(event).__name__, len(targets))
        for handler in targets:
            try:
                handler(event)
            except Exception:
                LOGGER.exception("Handler %r failed for %s", handler, type(event).__name__)


__all__ = [
    "ApiStatus",
    "ClientEvent",
    "ProductionStarted",
    "ProductionCompleted",
    "ProductionReset",
    "ApiConnected",
    "ApiDisconnected",
    "CancelRequested",
    "EventChannel",
]
