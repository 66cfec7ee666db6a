"""Failure types raised along the submission path."""

from __future__ import annotations

from typing import Any, Optional


class PodcastClientError(RuntimeError):
    """Base class for errors raised by the production client."""


class ProductionContractError(PodcastClientError):
    """The service answered in a way the client cannot continue from.

    Raised for a non-2xx upload or status response and for an upload response
    without a ``Location`` header.  Never retried.
    """

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message if status is None else f"{message} (HTTP {status})")
        self.status = status
        self.body = body


class ArchiveError(OSError):
    """The production archive could not be assembled."""


class ArchiveCleanupError(PodcastClientError):
    """The temporary archive survived the submission."""

    def __init__(self, path, cause: Optional[BaseException] = None):
        super().__init__(f"The file {path} could not be deleted, but should be.")
        self.path = path
        self.cause = cause


__all__ = [
    "PodcastClientError",
    "ProductionContractError",
    "ArchiveError",
    "ArchiveCleanupError",
]
