# src/store/local_store.py — v1
"""Local filesystem document store rooted at a vault directory."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from adockroki.store.base_store import BaseDocumentStore


class LocalDocumentStore(BaseDocumentStore):
    """Serve documents from a directory on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path | None:
        """Map a store path onto the filesystem, refusing escapes from root."""
        rel = PurePosixPath(path.lstrip("/"))
        if any(part == ".." for part in rel.parts):
            return None
        candidate = (self._root / rel).resolve()
        if candidate != self._root and self._root not in candidate.parents:
            return None
        return candidate

    async def read_text(self, path: str) -> str:
        p = self._resolve(path)
        if p is None or not p.is_file():
            raise FileNotFoundError(path)
        return p.read_text(encoding="utf-8")

    async def resolve(self, path: str) -> str | None:
        p = self._resolve(path)
        if p is None or not p.is_file():
            return None
        return p.relative_to(self._root).as_posix()

    def relative_path(self, file: str | Path) -> str:
        """Convert a filesystem path inside root into a store path."""
        p = Path(file).expanduser().resolve()
        return p.relative_to(self._root).as_posix()
