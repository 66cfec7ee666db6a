"""Upload a production archive and follow it until the media is ready.

One :meth:`ProductionSubmitter.submit` call owns one worker thread for the
whole life of a submission::

    CREATED -> UPLOADING -> POLLING -> COMPLETED | CANCELLED | FAILED

Polling continues only while the job is present in the :class:`PollRegistry`;
removing it (``PollRegistry.cancel``) ends the loop at its next boundary with a
``CANCELLED`` outcome.  The temporary archive is deleted on every path, and a
failed delete is raised rather than logged.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Protocol
from urllib.parse import urlparse

import requests

from podcast_client.client.archive import PodcastArchiveBuilder
from podcast_client.client.errors import ArchiveCleanupError, ProductionContractError
from podcast_client.client.registry import PollRegistry
from podcast_client.events import EventChannel, ProductionCompleted, ProductionReset, ProductionStarted
from podcast_client.runtime.storage import processing_path

LOGGER = logging.getLogger("podcast_client.submitter")
MEDIA_URL_KEY = "media-url"
DEFAULT_POLL_INTERVAL = 10


class ArchiveBuilder(Protocol):
    def build(self, destination, job_id, title, description, intro, interview, photo) -> Path:
        ...


class ProductionState(str, Enum):
    CREATED = "created"
    UPLOADING = "uploading"
    POLLING = "polling"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (ProductionState.COMPLETED, ProductionState.CANCELLED, ProductionState.FAILED)


@dataclass(frozen=True)
class ProductionOutcome:
    job_id: str
    state: ProductionState
    media_uri: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def completed(cls, job_id: str, media_uri: str) -> "ProductionOutcome":
        return cls(job_id, ProductionState.COMPLETED, media_uri=media_uri)

    @classmethod
    def cancelled(cls, job_id: str) -> "ProductionOutcome":
        return cls(job_id, ProductionState.CANCELLED)

    @classmethod
    def failed(cls, job_id: str, error: BaseException) -> "ProductionOutcome":
        return cls(job_id, ProductionState.FAILED, error=error)

    @property
    def ok(self) -> bool:
        return self.state is ProductionState.COMPLETED

    def to_dict(self) -> dict:
        data = {"job_id": self.job_id, "state": self.state.value}
        if self.media_uri:
            data["media_uri"] = self.media_uri
        if self.error is not None:
            data["error"] = f"{type(self.error).__name__}: {self.error}"
        return data


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


class ProductionSubmitter:
    def __init__(
        self,
        server_url: str,
        channel: EventChannel,
        registry: PollRegistry,
        archive_builder: Optional[ArchiveBuilder] = None,
        session: Optional[requests.Session] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = 30,
        archive_dir: Optional[Path] = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.channel = channel
        self.registry = registry
        self.archive_builder = archive_builder or PodcastArchiveBuilder()
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.archive_dir = Path(archive_dir) if archive_dir else None
        self._session = session or requests.Session()

    def submit(self, job_id: str, title: str, description: str, intro, interview, photo) -> ProductionOutcome:
        self.channel.publish(ProductionStarted(job_id=job_id))
        state = ProductionState.CREATED
        archive_paths: list[Path] = []
        try:
            destination = self._temp_archive_path(job_id)
            archive_paths.append(destination)
            archive = Path(
                self.archive_builder.build(destination, job_id, title, description, intro, interview, photo)
            )
            if archive != destination:
                archive_paths.append(archive)

            state = ProductionState.UPLOADING
            status_url = self._upload(job_id, archive)

            state = ProductionState.POLLING
            media_uri = self._poll(job_id, status_url)
            if media_uri is None:
                outcome = ProductionOutcome.cancelled(job_id)
            else:
                outcome = ProductionOutcome.completed(job_id, media_uri)
        except Exception as exc:
            LOGGER.exception("Production %s failed while %s", job_id, state.value)
            outcome = ProductionOutcome.failed(job_id, exc)
        finally:
            try:
                self._delete_archives(archive_paths)
            except ArchiveCleanupError:
                self.channel.publish(ProductionReset(job_id=job_id))
                raise

        LOGGER.info("Production %s finished: %s", job_id, outcome.state.value)
        if outcome.ok:
            self.channel.publish(ProductionCompleted(job_id=job_id, media_uri=outcome.media_uri))
        else:
            self.channel.publish(ProductionReset(job_id=job_id))
        return outcome

    def _temp_archive_path(self, job_id: str) -> Path:
        directory = self.archive_dir or processing_path()
        directory.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=f"podcast-archive-{job_id}", suffix=".zip", dir=directory)
        os.close(fd)
        return Path(name)

    def _upload(self, job_id: str, archive: Path) -> str:
        url = f"{self.server_url}/podcasts/{job_id}"
        LOGGER.debug("Uploading %s to %s", archive, url)
        with archive.open("rb") as fh:
            response = self._session.post(
                url,
                files={"file": (archive.name, fh, "application/zip")},
                timeout=self.timeout,
            )
        if not _is_success(response):
            raise ProductionContractError("The upload was rejected", response.status_code, response.text)
        location = response.headers.get("Location")
        if not location:
            raise ProductionContractError("The location URI must be non-null", response.status_code)
        # status URL = configured server + path of Location
        return self.server_url + urlparse(location).path

    def _poll(self, job_id: str, status_url: str) -> Optional[str]:
        token = self.registry.register(job_id)
        try:
            while self.registry.is_active(job_id):
                response = self._session.get(status_url, timeout=self.timeout)
                if not _is_success(response):
                    raise ProductionContractError(
                        "The status request must return a 2xx response", response.status_code, response.text
                    )
                status = response.json()
                if not isinstance(status, dict):
                    raise ProductionContractError("The status document must be an object", body=status)
                if MEDIA_URL_KEY in status:
                    return str(status[MEDIA_URL_KEY])
                LOGGER.debug("Sleeping %ss while checking the production status at %s", self.poll_interval, status_url)
                token.wait(self.poll_interval)
            LOGGER.debug("%s is no longer being polled; returning", job_id)
            return None
        finally:
            self.registry.release(job_id, token)

    @staticmethod
    def _delete_archives(paths: Iterable[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise ArchiveCleanupError(path, exc) from exc
            if path.exists():
                raise ArchiveCleanupError(path)


__all__ = [
    "MEDIA_URL_KEY",
    "DEFAULT_POLL_INTERVAL",
    "ArchiveBuilder",
    "ProductionState",
    "ProductionOutcome",
    "ProductionSubmitter",
]
