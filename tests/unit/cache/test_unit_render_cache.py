# tests/unit/cache/test_unit_render_cache.py — v1
"""Tests for cache/render_cache.py, cache/fingerprint.py and cache/models.py."""

from __future__ import annotations

import hashlib
import json

from adockroki.cache.fingerprint import compute_fingerprint, mime_for
from adockroki.cache.models import CacheRecord, DiagramCacheData
from adockroki.cache.render_cache import RenderCache


class TestFingerprint:
    def test_deterministic_hex(self):
        a = compute_fingerprint("plantuml", "svg", "A->B")
        assert a == compute_fingerprint("plantuml", "svg", "A->B")
        assert len(a) == 64
        int(a, 16)

    def test_every_component_matters(self):
        base = compute_fingerprint("plantuml", "svg", "A->B")
        assert compute_fingerprint("mermaid", "svg", "A->B") != base
        assert compute_fingerprint("plantuml", "png", "A->B") != base
        assert compute_fingerprint("plantuml", "svg", "A->C") != base

    def test_key_is_sha256_of_newline_joined_parts(self):
        expected = hashlib.sha256(b"plantuml\nsvg\nA->B").hexdigest()
        assert compute_fingerprint("plantuml", "svg", "A->B") == expected

    def test_mime(self):
        assert mime_for("svg") == "image/svg+xml"
        assert mime_for("png") == "image/png"


class TestRenderCache:
    def test_put_get(self):
        cache = RenderCache()
        record = cache.put("k", "image/svg+xml", b"<svg/>", saved_at=5)
        assert cache.get("k") == record
        assert record.payload == b"<svg/>"
        assert "k" in cache
        assert len(cache) == 1

    def test_get_does_not_refresh_saved_at(self):
        cache = RenderCache()
        cache.put("k", "image/png", b"x", saved_at=1)
        cache.get("k")
        assert cache.get("k").saved_at == 1

    def test_trim_evicts_oldest(self):
        cache = RenderCache()
        cache.put("old", "image/svg+xml", b"1", saved_at=100)
        cache.put("mid", "image/svg+xml", b"2", saved_at=200)
        cache.put("new", "image/svg+xml", b"3", saved_at=300)

        assert cache.trim(2) == 1
        assert "old" not in cache
        assert "mid" in cache and "new" in cache

    def test_trim_ignores_insertion_order(self):
        cache = RenderCache()
        cache.put("newest", "m", b"", saved_at=30)
        cache.put("oldest", "m", b"", saved_at=10)
        cache.put("middle", "m", b"", saved_at=20)
        cache.trim(1)
        assert list(cache.data.items) == ["newest"]

    def test_trim_noop_within_limit_or_disabled(self):
        cache = RenderCache()
        cache.put("a", "m", b"", saved_at=1)
        assert cache.trim(1) == 0
        assert cache.trim(0) == 0
        assert len(cache) == 1

    def test_clear(self):
        cache = RenderCache()
        cache.put("a", "m", b"")
        cache.clear()
        assert len(cache) == 0

    def test_wraps_existing_data(self):
        data = DiagramCacheData()
        cache = RenderCache(data)
        cache.put("a", "m", b"")
        assert "a" in data.items


class TestPersistedLayout:
    def test_json_uses_camel_case_keys(self):
        cache = RenderCache()
        cache.put("f" * 64, "image/svg+xml", b"<svg/>", saved_at=1700000000000)
        raw = json.loads(cache.data.to_json())
        assert raw["version"] == 1
        item = raw["items"]["f" * 64]
        assert set(item) == {"mime", "payloadBase64", "savedAt"}
        assert item["savedAt"] == 1700000000000

    def test_round_trip_by_alias(self):
        raw = {"version": 1, "items": {"k": {"mime": "image/png", "payloadBase64": "eA==", "savedAt": 3}}}
        data = DiagramCacheData.model_validate(raw)
        assert data.items["k"] == CacheRecord(mime="image/png", payload_base64="eA==", saved_at=3)
        assert data.items["k"].payload == b"x"
