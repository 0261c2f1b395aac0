# src/kroki/cached_render.py — v1
"""Render through the cache: one network call per fingerprint."""

from __future__ import annotations

import logging
from collections.abc import Callable

from adockroki.cache.fingerprint import compute_fingerprint, mime_for
from adockroki.cache.render_cache import RenderCache
from adockroki.core.models import RenderedDiagram
from adockroki.kroki.client import KrokiClient

logger = logging.getLogger(__name__)


async def render_with_cache(
    client: KrokiClient,
    cache: RenderCache,
    diagram_kind: str,
    output_format: str,
    source: str,
    reject: Callable[[bytes], bool] | None = None,
) -> RenderedDiagram:
    """Return the cached payload for (kind, format, source) or render and store it.

    Transport errors propagate before anything is written to the cache.
    A fresh payload for which ``reject`` returns True is returned but not stored.
    """
    key = compute_fingerprint(diagram_kind, output_format, source)
    hit = cache.get(key)
    if hit is not None:
        logger.debug("Diagram cache hit %s", key[:12])
        return RenderedDiagram(
            mime=hit.mime, data=hit.payload, cache_key=key, from_cache=True
        )

    data = await client.render(diagram_kind, output_format, source)
    mime = mime_for(output_format)
    if reject is not None and reject(data):
        logger.debug("Rendered payload rejected, not caching %s", key[:12])
    else:
        cache.put(key, mime, data)
    return RenderedDiagram(mime=mime, data=data, cache_key=key)
