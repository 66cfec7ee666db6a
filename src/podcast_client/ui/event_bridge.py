"""Relay client events onto Qt signals.

Channel handlers run on whichever thread published the event (the monitor
thread or a production worker).  Emitting a Qt signal from there is safe:
receivers living on the GUI thread get the call through a queued connection.
"""

from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal

from podcast_client.events import (
    ApiConnected,
    ApiDisconnected,
    ClientEvent,
    EventChannel,
    ProductionCompleted,
    ProductionReset,
    ProductionStarted,
)


class QtEventBridge(QObject):
    event_emitted = pyqtSignal(object)
    connection_changed = pyqtSignal(bool)
    production_started = pyqtSignal(str)
    production_completed = pyqtSignal(str, str)
    production_reset = pyqtSignal(str)

    def __init__(self, channel: EventChannel, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.channel = channel
        self.connected = False
        channel.subscribe(ClientEvent, self._relay)

    def detach(self) -> None:
        self.channel.unsubscribe(ClientEvent, self._relay)

    def can_publish(self, request_ready: bool) -> bool:
        """Publishing needs a complete form and a reachable service."""
        return request_ready and self.connected

    def _relay(self, event: ClientEvent) -> None:
        if isinstance(event, ApiConnected):
            self.connected = True
            self.connection_changed.emit(True)
        elif isinstance(event, ApiDisconnected):
            self.connected = False
            self.connection_changed.emit(False)
        elif isinstance(event, ProductionStarted):
            self.production_started.emit(event.job_id)
        elif isinstance(event, ProductionCompleted):
            self.production_completed.emit(event.job_id, event.media_uri)
        elif isinstance(event, ProductionReset):
            self.production_reset.emit(event.job_id)
        self.event_emitted.emit(event)


__all__ = ["QtEventBridge"]
