# src/cache/models.py — v1
"""Diagram cache models: CacheRecord and the persisted DiagramCacheData layout.

Persisted JSON shape (version 1):
    {"version": 1, "items": {"<sha256 hex>": {"mime": ..., "payloadBase64": ..., "savedAt": <epoch ms>}}}
"""

from __future__ import annotations

import base64
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

CACHE_VERSION = 1


class CacheRecord(BaseModel):
    """One rendered payload."""

    model_config = ConfigDict(populate_by_name=True)

    mime: str
    payload_base64: str = Field(alias="payloadBase64")
    saved_at: int = Field(alias="savedAt")

    @property
    def payload(self) -> bytes:
        return base64.b64decode(self.payload_base64)


class DiagramCacheData(BaseModel):
    """Process-wide cache contents as persisted by a cache store."""

    version: Literal[1] = CACHE_VERSION
    items: dict[str, CacheRecord] = Field(default_factory=dict)

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)
