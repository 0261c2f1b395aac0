# src/store/base_store.py — v1
"""Abstract document store interface.

Paths are store-relative, forward-slash separated, without a leading slash.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseDocumentStore(ABC):
    """Read-only view of the document vault consumed by the pipeline."""

    @abstractmethod
    async def read_text(self, path: str) -> str:
        """Return the UTF-8 content of the file at path.

        Raises:
            FileNotFoundError: If no file exists at path.
        """

    @abstractmethod
    async def resolve(self, path: str) -> str | None:
        """Return the canonical path if a regular file exists there, else None."""

    async def exists(self, path: str) -> bool:
        """Check whether a file exists at path."""
        return await self.resolve(path) is not None
