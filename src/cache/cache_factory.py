# src/cache/cache_factory.py — v1
"""Factory for cache store instantiation."""

from __future__ import annotations

from adockroki.cache.base_cache_store import BaseCacheStore
from adockroki.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to an in-memory store.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from adockroki.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if backend == "json":
        from adockroki.cache.json_store import JsonCacheStore
        return JsonCacheStore(settings.cache_path)  # type: ignore[union-attr]

    raise ValueError(f"Unsupported cache backend: {backend!r}")
