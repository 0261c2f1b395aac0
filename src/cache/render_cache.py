# src/cache/render_cache.py — v1
"""In-memory render cache keyed by diagram fingerprint.

Records are written once per fingerprint and never refreshed on read, so
trimming evicts by oldest ``saved_at`` (insertion recency, not LRU).
"""

from __future__ import annotations

import base64
import logging
import time

from adockroki.cache.models import CacheRecord, DiagramCacheData

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class RenderCache:
    """Wraps DiagramCacheData with get/put/trim operations."""

    def __init__(self, data: DiagramCacheData | None = None) -> None:
        self._data = data if data is not None else DiagramCacheData()

    @property
    def data(self) -> DiagramCacheData:
        return self._data

    def __len__(self) -> int:
        return len(self._data.items)

    def __contains__(self, key: object) -> bool:
        return key in self._data.items

    def get(self, key: str) -> CacheRecord | None:
        return self._data.items.get(key)

    def put(
        self, key: str, mime: str, payload: bytes, saved_at: int | None = None
    ) -> CacheRecord:
        record = CacheRecord(
            mime=mime,
            payload_base64=base64.b64encode(payload).decode("ascii"),
            saved_at=_now_ms() if saved_at is None else saved_at,
        )
        self._data.items[key] = record
        return record

    def trim(self, max_items: int) -> int:
        """Drop oldest records until at most max_items remain.

        max_items <= 0 disables trimming. Returns the number removed.
        """
        if max_items <= 0 or len(self._data.items) <= max_items:
            return 0

        by_age = sorted(self._data.items.items(), key=lambda kv: kv[1].saved_at)
        excess = len(by_age) - max_items
        for key, _record in by_age[:excess]:
            del self._data.items[key]

        logger.info("Trimmed %d diagram cache entries (max %d)", excess, max_items)
        return excess

    def clear(self) -> None:
        self._data.items.clear()
