# src/store/memory_store.py — v1
"""In-memory document store, used for tests and embedding callers."""

from __future__ import annotations

from adockroki.store.base_store import BaseDocumentStore


class InMemoryDocumentStore(BaseDocumentStore):
    """Dictionary-backed store mapping store paths to text."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._files: dict[str, str] = dict(files or {})
        self.reads: list[str] = []

    def write(self, path: str, content: str) -> None:
        self._files[path.lstrip("/")] = content

    def delete(self, path: str) -> None:
        self._files.pop(path.lstrip("/"), None)

    async def read_text(self, path: str) -> str:
        key = path.lstrip("/")
        if key not in self._files:
            raise FileNotFoundError(path)
        self.reads.append(key)
        return self._files[key]

    async def resolve(self, path: str) -> str | None:
        key = path.lstrip("/")
        return key if key in self._files else None
