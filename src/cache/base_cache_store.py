# src/cache/base_cache_store.py — v1
"""Abstract persistence interface for the diagram cache."""

from __future__ import annotations

from abc import ABC, abstractmethod

from adockroki.cache.models import DiagramCacheData


class BaseCacheStore(ABC):
    """Loads and saves the whole DiagramCacheData document."""

    @abstractmethod
    async def load(self) -> DiagramCacheData:
        """Return persisted cache data, or an empty v1 cache."""

    @abstractmethod
    async def save(self, data: DiagramCacheData) -> None:
        """Persist cache data, replacing what was stored."""
