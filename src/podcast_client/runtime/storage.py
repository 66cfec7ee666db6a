"""Where the client keeps files it creates at runtime.

Everything lives under one root, ``var/`` next to the checkout unless
``PODCAST_CLIENT_STORAGE_ROOT`` points elsewhere.  ``settings/`` holds the
``client.yaml`` copied from the packaged template, ``processing/`` receives the
short-lived production archives (each removed when its submission ends), and
``logs/`` collects the CLI log files.  Folders are created on first access.
"""

from __future__ import annotations

import os
from functools import lru_cache
from os import PathLike
from pathlib import Path

STORAGE_ROOT_ENV = "PODCAST_CLIENT_STORAGE_ROOT"


@lru_cache(maxsize=1)
def storage_root() -> Path:
    """Return the root directory where runtime data should be stored."""
    custom_root = os.environ.get(STORAGE_ROOT_ENV)
    if custom_root:
        base = Path(custom_root).expanduser()
    else:
        # Project root (…/src/../../) / "var"
        base = Path(__file__).resolve().parents[3] / "var"
    base.mkdir(parents=True, exist_ok=True)
    return base


def _subdir(name: str) -> Path:
    path = storage_root() / name
    path.mkdir(parents=True, exist_ok=True)
    return path


def processing_path(*parts: str | PathLike[str]) -> Path:
    base = _subdir("processing")
    return base if not parts else base.joinpath(*parts)


def settings_path(*parts: str | PathLike[str]) -> Path:
    base = _subdir("settings")
    return base if not parts else base.joinpath(*parts)


def logs_path(*parts: str | PathLike[str]) -> Path:
    """Return a path inside the runtime logs directory."""
    base = _subdir("logs")
    return base if not parts else base.joinpath(*parts)


def ensure_runtime_dirs() -> None:
    """Ensure commonly used subdirectories exist."""
    for name in ("processing", "settings", "logs"):
        _subdir(name)
