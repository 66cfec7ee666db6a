"""Facade that wires the monitor, the poll registry and the submitter.

Typical desktop usage::

    client = ApiClient.from_config(load_client_config()[0])
    client.channel.subscribe(ProductionCompleted, on_completed)
    client.start()
    future = client.publish(title, description, intro, interview, photo)
    ...
    client.cancel(job_id)      # or publish CancelRequested on the channel
    client.close()
"""

from __future__ import annotations

import logging
import shutil
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional

import requests

from podcast_client.client.config import ClientConfig
from podcast_client.client.connectivity import ConnectivityMonitor
from podcast_client.client.registry import PollRegistry
from podcast_client.client.submitter import (
    DEFAULT_POLL_INTERVAL,
    ArchiveBuilder,
    ProductionOutcome,
    ProductionSubmitter,
)
from podcast_client.events import CancelRequested, EventChannel

LOGGER = logging.getLogger("podcast_client.api")


class ApiClient:
    def __init__(
        self,
        server_url: str,
        channel: Optional[EventChannel] = None,
        session: Optional[requests.Session] = None,
        archive_builder: Optional[ArchiveBuilder] = None,
        monitor_interval: float = 5,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = 30,
        max_workers: int = 2,
        archive_dir: Optional[Path] = None,
    ) -> None:
        if not server_url or not server_url.strip():
            raise ValueError("The server URL provided is empty")
        self.server_url = server_url.strip().rstrip("/")
        self.monitor_interval = monitor_interval
        self.timeout = timeout
        self.channel = channel or EventChannel()
        self.registry = PollRegistry()
        self._session = session or requests.Session()
        self.monitor = ConnectivityMonitor(self.server_url, self.channel, session=self._session, timeout=timeout)
        self.submitter = ProductionSubmitter(
            self.server_url,
            self.channel,
            self.registry,
            archive_builder=archive_builder,
            session=self._session,
            poll_interval=poll_interval,
            timeout=timeout,
            archive_dir=archive_dir,
        )
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="production")
        self.channel.subscribe(CancelRequested, self._on_cancel_requested)
        LOGGER.debug(
            "The server URL is %s and the actuator URL is %s", self.server_url, self.monitor.health_url
        )

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "ApiClient":
        return cls(
            config.server_url,
            monitor_interval=config.monitor_interval,
            poll_interval=config.poll_interval,
            timeout=config.request_timeout,
            max_workers=config.max_workers,
            **kwargs,
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def start(self) -> None:
        """Begin monitoring; call once the UI is ready to receive events."""
        self.monitor.start(self.monitor_interval)

    def publish(
        self,
        title: str,
        description: str,
        intro,
        interview,
        photo,
        job_id: Optional[str] = None,
    ) -> "Future[ProductionOutcome]":
        job_id = job_id or str(uuid.uuid4())
        LOGGER.debug(
            "Submitting %s with introduction %s, interview %s and photo %s", job_id, intro, interview, photo
        )
        future = self._executor.submit(
            self.submitter.submit, job_id, title, description, intro, interview, photo
        )
        future.job_id = job_id  # type: ignore[attr-defined]
        return future

    def cancel(self, job_id: str) -> None:
        self.channel.publish(CancelRequested(job_id=job_id))

    def _on_cancel_requested(self, event: CancelRequested) -> None:
        self.registry.cancel(event.job_id)

    def download_media(self, media_uri: str, destination: str | Path, chunk_size: int = 64 * 1024) -> Path:
        """Stream a produced media file to ``destination``."""
        target = Path(destination)
        target.parent.mkdir(parents=True, exist_ok=True)
        partial = target.with_name(target.name + ".part")
        with self._session.get(media_uri, stream=True, timeout=self.timeout) as response:
            response.raise_for_status()
            try:
                with partial.open("wb") as fh:
                    for chunk in response.iter_content(chunk_size=chunk_size):
                        if chunk:
                            fh.write(chunk)
                shutil.move(str(partial), str(target))
            finally:
                partial.unlink(missing_ok=True)
        LOGGER.info("Downloaded %s to %s", media_uri, target)
        return target

    def close(self) -> None:
        self.monitor.stop(timeout=self.timeout)
        self.registry.cancel_all()
        self._executor.shutdown(wait=True)
        self.channel.unsubscribe(CancelRequested, self._on_cancel_requested)
        self._session.close()


__all__ = ["ApiClient"]
