# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides an in-memory document store, settings isolated from .env, and a
fake Kroki endpoint built on httpx.MockTransport. No network access.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from adockroki.cache.render_cache import RenderCache
from adockroki.config.settings import Settings
from adockroki.kroki.client import KrokiClient
from adockroki.logging.context import clear_context
from adockroki.store.memory_store import InMemoryDocumentStore

OK_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg">'
    '<rect x="0" y="0" width="10" height="10"/>'
    '<path d="M0 0 L10 10"/><line x1="0" y1="0" x2="5" y2="5"/>'
    "</svg>"
)
ERROR_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg">'
    "<text>Syntax Error? (Assumed diagram type: sequence)</text>"
    "</svg>"
)
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-data"


class FakeKroki:
    """Records requests and answers them like a Kroki server would.

    ``responses`` maps a substring of the request body to (status, body);
    requests matching nothing get OK_SVG (or PNG_BYTES for /png).
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, tuple[int, bytes]] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = request.content.decode("utf-8")
        for needle, (status, payload) in self.responses.items():
            if needle in body:
                return httpx.Response(status, content=payload)
        if request.url.path.endswith("/png"):
            return httpx.Response(200, content=PNG_BYTES)
        return httpx.Response(200, content=OK_SVG.encode("utf-8"))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def bodies(self) -> list[str]:
        return [r.content.decode("utf-8") for r in self.requests]


# === FIXTURES: Settings / context ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from any .env, with a memory cache backend."""
    return Settings(
        _env_file=None,
        cache_backend="memory",
        cache_path=tmp_path / "cache" / "diagram-cache.json",
        include_markers=False,
    )


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


# === FIXTURES: Stores ===


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


# === FIXTURES: Kroki ===


@pytest.fixture
def fake_kroki() -> FakeKroki:
    return FakeKroki()


@pytest.fixture
def kroki_client(fake_kroki: FakeKroki) -> KrokiClient:
    # MockTransport holds no connections; nothing to close.
    return KrokiClient("https://kroki.test", transport=fake_kroki.transport)


@pytest.fixture
def render_cache() -> RenderCache:
    return RenderCache()
