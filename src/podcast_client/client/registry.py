"""Registry of submissions whose status is still being polled."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

LOGGER = logging.getLogger("podcast_client.registry")


class PollToken:
    """Cancellation flag for one poll loop.

    ``wait`` doubles as the back-off sleep: it returns early once the token is
    cancelled so the loop notices on its next boundary.
    """

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        self._cancelled = threading.Event()

    @property
    def active(self) -> bool:
        return not self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True if cancelled meanwhile."""
        if seconds <= 0:
            return self._cancelled.is_set()
        return self._cancelled.wait(timeout=seconds)

    def __repr__(self) -> str:
        return f"PollToken({self.job_id!r}, active={self.active})"


class PollRegistry:
    """Job id -> :class:`PollToken`.

    A poll loop keeps going only while its entry is present.  All operations
    are safe to call from any thread; cancelling an unknown or finished job is
    a no-op.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, PollToken] = {}
        self._lock = threading.Lock()
        self._closed = False

    def register(self, job_id: str) -> PollToken:
        """Insert an active token for ``job_id``.

        After :meth:`cancel_all` the registry is closed: the returned token is
        already cancelled and nothing is stored, so late registrations never poll.
        """
        token = PollToken(job_id)
        with self._lock:
            if self._closed:
                token.cancel()
                LOGGER.debug("Registry closed; %s will not be polled", job_id)
                return token
            previous = self._entries.get(job_id)
            self._entries[job_id] = token
        if previous is not None:
            LOGGER.warning("Job %s was already registered; replacing its poll entry", job_id)
        return token

    def cancel(self, job_id: str) -> bool:
        with self._lock:
            token = self._entries.pop(job_id, None)
        if token is None:
            LOGGER.debug("Cancel for %s ignored: not polling", job_id)
            return False
        token.cancel()
        LOGGER.info("Polling cancelled for %s", job_id)
        return True

    def release(self, job_id: str, token: PollToken) -> None:
        """Drop ``job_id`` if it still maps to ``token``."""
        with self._lock:
            if self._entries.get(job_id) is token:
                del self._entries[job_id]

    def is_active(self, job_id: str) -> bool:
        with self._lock:
            token: Optional[PollToken] = self._entries.get(job_id)
        return token is not None and token.active

    def active_jobs(self) -> List[str]:
        with self._lock:
            return [job_id for job_id, token in self._entries.items() if token.active]

    @property
    def closed(self) -> bool:
        return self._closed

    def cancel_all(self) -> None:
        """Cancel every entry and refuse later registrations."""
        with self._lock:
            self._closed = True
            tokens = list(self._entries.values())
            self._entries.clear()
        for token in tokens:
            token.cancel()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["PollToken", "PollRegistry"]
