# src/cache/json_store.py — v1
"""JSON file cache store (default CACHE_BACKEND=json)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from adockroki.cache.base_cache_store import BaseCacheStore
from adockroki.cache.models import CACHE_VERSION, DiagramCacheData

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """Whole-cache JSON document on the local filesystem."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> DiagramCacheData:
        if not self._path.exists():
            return DiagramCacheData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Failed to read diagram cache %s: %s", self._path, e)
            return DiagramCacheData()

        if not isinstance(raw, dict) or raw.get("version") != CACHE_VERSION:
            logger.warning(
                "Discarding diagram cache %s with unsupported layout", self._path
            )
            return DiagramCacheData()

        try:
            return DiagramCacheData.model_validate(raw)
        except ValidationError as e:
            logger.warning("Invalid diagram cache %s: %s", self._path, e)
            return DiagramCacheData()

    async def save(self, data: DiagramCacheData) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(data.to_json(), encoding="utf-8")
        tmp.replace(self._path)
