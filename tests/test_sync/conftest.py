"""
Shared fixtures for sync tests.

Provides:
- Fixture loading for recorded GitHub API responses
- FakeRemote, an httpx.MockTransport-backed stand-in for GitHub
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

API = "https://api.github.com"
RELEASE_REPO = "NeverSinkDev/NeverSink-PoE2litefilter"
BRANCH_REPO = "cdrg/cdr-poe2filter"


class FakeRemote:
    """
    In-memory GitHub.

    Routes are keyed by URL without query string. Unknown URLs answer 404
    like the real API. Every request is recorded for assertions.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    @staticmethod
    def key(url: httpx.URL) -> str:
        return f"{url.scheme}://{url.host}{url.path}"

    def add_json(self, url: str, data: Any, status_code: int = 200) -> None:
        self.routes[url] = lambda request: httpx.Response(status_code, json=data)

    def add_bytes(self, url: str, content: bytes, status_code: int = 200) -> None:
        self.routes[url] = lambda request: httpx.Response(status_code, content=content)

    def add_handler(self, url: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[url] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(self.key(request.url))
        if handler is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, url: str) -> list[httpx.Request]:
        """Requests made to ``url`` (query string ignored)."""
        return [r for r in self.requests if self.key(r.url) == url]


@pytest.fixture
def fixture_dir() -> Path:
    """Path to recorded GitHub API responses."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def releases_response(fixture_dir: Path) -> list[dict[str, Any]]:
    """GitHub "list releases" response with one release (tag 0.5.2)."""
    return json.loads((fixture_dir / "github_releases.json").read_text())


@pytest.fixture
def branch_response(fixture_dir: Path) -> dict[str, Any]:
    """GitHub "get branch" response for cdrg/cdr-poe2filter@main."""
    return json.loads((fixture_dir / "github_branch.json").read_text())


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def releases_url() -> str:
    return f"{API}/repos/{RELEASE_REPO}/releases"


@pytest.fixture
def branch_url() -> str:
    return f"{API}/repos/{BRANCH_REPO}/branches/main"
