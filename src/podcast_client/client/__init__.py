"""Submission, polling and connectivity monitoring for the production service."""

from .api import ApiClient  # noqa: F401
from .archive import PodcastArchiveBuilder, ProductionRequest  # noqa: F401
from .config import ClientConfig, load_client_config, save_client_config  # noqa: F401
from .connectivity import ConnectivityMonitor  # noqa: F401
from .errors import (  # noqa: F401
    ArchiveCleanupError,
    ArchiveError,
    PodcastClientError,
    ProductionContractError,
)
from .registry import PollRegistry, PollToken  # noqa: F401
from .submitter import (  # noqa: F401
    MEDIA_URL_KEY,
    ProductionOutcome,
    ProductionState,
    ProductionSubmitter,
)

__all__ = [
    "ApiClient",
    "ArchiveCleanupError",
    "ArchiveError",
    "ClientConfig",
    "ConnectivityMonitor",
    "MEDIA_URL_KEY",
    "PodcastArchiveBuilder",
    "PodcastClientError",
    "PollRegistry",
    "PollToken",
    "ProductionContractError",
    "ProductionOutcome",
    "ProductionRequest",
    "ProductionState",
    "ProductionSubmitter",
    "load_client_config",
    "save_client_config",
]
