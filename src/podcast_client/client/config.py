"""Loading and saving ``client.yaml``."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from podcast_client.client.submitter import DEFAULT_POLL_INTERVAL
from podcast_client.runtime.storage import ensure_runtime_dirs, settings_path

LOGGER = logging.getLogger("podcast_client.config")
SERVER_URL_ENV = "PODCAST_SERVER_URL"
CONFIG_FILENAME = "client.yaml"


def _read_template() -> str:
    template = resources.files("podcast_client.config").joinpath("client.example.yaml")
    return template.read_text(encoding="utf-8")


@dataclass
class ClientConfig:
    server_url: str = "http://localhost:8080"
    monitor_interval: int = 5
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = 30
    max_workers: int = 2

    def __post_init__(self) -> None:
        self.server_url = self.server_url.strip().rstrip("/")
        if not self.server_url:
            raise ValueError("The server URL provided is empty")

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ClientConfig":
        server_url = os.environ.get(SERVER_URL_ENV) or str(raw.get("server_url") or cls.server_url)
        return cls(
            server_url=server_url,
            monitor_interval=max(1, int(raw.get("monitor_interval", cls.monitor_interval))),
            poll_interval=max(1.0, float(raw.get("poll_interval", cls.poll_interval))),
            request_timeout=float(raw.get("request_timeout", cls.request_timeout)),
            max_workers=max(1, int(raw.get("max_workers", cls.max_workers))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "server_url": self.server_url,
            "monitor_interval": self.monitor_interval,
            "poll_interval": self.poll_interval,
            "request_timeout": self.request_timeout,
            "max_workers": self.max_workers,
        }


def load_client_config(path: str | Path | None = None):
    """Load the client config, copying the template on first use."""
    ensure_runtime_dirs()
    cfg_path = Path(path) if path else settings_path(CONFIG_FILENAME)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    created = False
    if not cfg_path.exists():
        cfg_path.write_text(_read_template(), encoding="utf-8")
        created = True
        LOGGER.info("Created default config at %s", cfg_path)
    data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{cfg_path} must contain a mapping, got {type(data).__name__}")
    return ClientConfig.from_dict(data), cfg_path, created


def save_client_config(config: ClientConfig, path: str | Path | None = None) -> Path:
    """Persist the client config to disk."""
    cfg_path = Path(path) if path else settings_path(CONFIG_FILENAME)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    with cfg_path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(config.to_dict(), fh, allow_unicode=True, sort_keys=False)
    return cfg_path


__all__ = ["ClientConfig", "load_client_config", "save_client_config", "SERVER_URL_ENV"]
