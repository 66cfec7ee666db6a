"""Reachability monitor for the production service.

Probes the Actuator health endpoint on a fixed delay and publishes
:class:`ApiConnected` / :class:`ApiDisconnected` only when the observed state
flips.  Network errors, timeouts and unparseable bodies all count as
"disconnected"; none of them escape the probe.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

import requests

from podcast_client.events import ApiConnected, ApiDisconnected, ApiStatus, EventChannel

LOGGER = logging.getLogger("podcast_client.connectivity")


class ConnectivityMonitor:
    def __init__(
        self,
        server_url: str,
        channel: EventChannel,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.health_url = self.server_url + "/actuator/health"
        self.channel = channel
        self.timeout = timeout
        self._session = session or requests.Session()
        self._connected = False
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self, interval_seconds: float) -> None:
        previous = self._thread
        if previous and previous.is_alive():
            if not self._stop_event.is_set():
                LOGGER.debug("Monitor already running")
                return
            if previous is not threading.current_thread():
                # a stopped run may still be inside its last health request
                previous.join()
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(interval_seconds, stop_event),
            name="connectivity-monitor",
            daemon=True,
        )
        self._thread.start()
        LOGGER.debug("Monitoring %s every %ss", self.health_url, interval_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout)
        if thread is not None and not thread.is_alive():
            self._thread = None

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive() and not self._stop_event.is_set())

    def _run(self, interval_seconds: float, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self.probe()
            # fixed delay: the wait starts only after the probe returned
            if stop_event.wait(timeout=max(0.0, interval_seconds)):
                break
        LOGGER.debug("Monitor stopped")

    def probe(self) -> bool:
        """Run one health check, publish on state change, return the result."""
        try:
            healthy = self._check()
        except Exception as exc:
            LOGGER.debug("Could not reach %s: %s", self.health_url, exc)
            healthy = False

        event = None
        with self._state_lock:
            if healthy and not self._connected:
                self._connected = True
                event = ApiConnected(status=self._snapshot())
            elif not healthy and self._connected:
                self._connected = False
                event = ApiDisconnected(status=self._snapshot())
        if event is not None:
            LOGGER.info("%s: %s", type(event).__name__, self.server_url)
            self.channel.publish(event)
        return healthy

    def _check(self) -> bool:
        response = self._session.get(self.health_url, timeout=self.timeout)
        LOGGER.debug("Response from %s: %s", self.health_url, response.text)
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError(f"health body is not an object: {body!r}")
        status = str(body.get("status", ""))
        return 200 <= response.status_code < 300 and status.upper() == "UP"

    def _snapshot(self) -> ApiStatus:
        return ApiStatus(timestamp=datetime.now(timezone.utc), server_url=self.server_url)


__all__ = ["ConnectivityMonitor"]
