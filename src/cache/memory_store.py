# src/cache/memory_store.py — v1
"""Non-persistent cache store (CACHE_BACKEND=memory)."""

from __future__ import annotations

from adockroki.cache.base_cache_store import BaseCacheStore
from adockroki.cache.models import DiagramCacheData


class MemoryCacheStore(BaseCacheStore):
    """Keeps a copy of the cache for the lifetime of the process."""

    def __init__(self) -> None:
        self._data = DiagramCacheData()
        self.save_count = 0

    async def load(self) -> DiagramCacheData:
        return self._data.model_copy(deep=True)

    async def save(self, data: DiagramCacheData) -> None:
        self._data = data.model_copy(deep=True)
        self.save_count += 1
