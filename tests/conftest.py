"""Shared fixtures: isolated runtime storage and a scripted HTTP session."""

from __future__ import annotations

import json
import threading
from collections import deque
from typing import Any

import pytest

from podcast_client.runtime import storage


@pytest.fixture(autouse=True)
def runtime_root(tmp_path, monkeypatch):
    root = tmp_path / "var"
    monkeypatch.setenv(storage.STORAGE_ROOT_ENV, str(root))
    monkeypatch.delenv("PODCAST_SERVER_URL", raising=False)
    storage.storage_root.cache_clear()
    yield root
    storage.storage_root.cache_clear()


class DummyResponse:
    def __init__(self, status_code: int = 200, body: Any = None, headers=None, text: str | None = None, content=b""):
        self.status_code = status_code
        self._body = body
        self.headers = dict(headers or {})
        if text is not None:
            self.text = text
        else:
            self.text = json.dumps(body) if body is not None else ""
        self._content = content

    def json(self):
        if self._body is None:
            return json.loads(self.text)
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self._content), chunk_size):
            yield self._content[start:start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class DummySession:
    """Replays queued responses per (method, url) and records every call.

    A queued ``Exception`` instance is raised instead of returned.  When a
    queue runs down to its last item that item keeps being replayed.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], deque] = {}
        self.calls: list[tuple[str, str, dict]] = []
        self.uploads: list[bytes] = []
        self.closed = False
        self._lock = threading.Lock()

    def queue(self, method: str, url: str, *responses) -> "DummySession":
        self.routes.setdefault((method.upper(), url), deque()).extend(responses)
        return self

    def _next(self, method: str, url: str, kwargs: dict):
        with self._lock:
            self.calls.append((method, url, kwargs))
            pending = self.routes.get((method, url))
            if not pending:
                raise ConnectionError(f"no route for {method} {url}")
            item = pending.popleft() if len(pending) > 1 else pending[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)

    def post(self, url, **kwargs):
        files = kwargs.get("files") or {}
        if "file" in files:
            self.uploads.append(files["file"][1].read())
        return self._next("POST", url, kwargs)

    def count(self, method: str, url: str) -> int:
        with self._lock:
            return sum(1 for m, u, _ in self.calls if m == method and u == url)

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    return DummySession()


@pytest.fixture
def media_files(tmp_path):
    src = tmp_path / "media"
    src.mkdir()
    intro = src / "intro.mp3"
    interview = src / "interview.mp3"
    photo = src / "photo.jpg"
    intro.write_bytes(b"intro-bytes")
    interview.write_bytes(b"interview-bytes")
    photo.write_bytes(b"photo-bytes")
    return intro, interview, photo


@pytest.fixture
def make_response():
    return DummyResponse
