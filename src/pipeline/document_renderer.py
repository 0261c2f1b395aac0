# src/pipeline/document_renderer.py — v1
"""Document renderer — one full render run for a single document.

  Step 1 — read the root document
  Step 2 — mask diagram blocks, expand include:: directives, unmask
  Step 3 — diagram pipeline (PlantUML includes, cache, Kroki, substitution)
  Step 4 — optional markup conversion through an opaque converter
  Step 5 — persist the diagram cache if the run changed it

The returned dependency set lists every store path read for this run; a
caller compares file-change events against it to decide on re-rendering.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from adockroki.cache.cache_factory import create_cache_store
from adockroki.cache.render_cache import RenderCache
from adockroki.compose.include_resolver import CompositionState, IncludeResolver
from adockroki.core.models import RenderResult
from adockroki.diagrams.extractor import mask_diagram_blocks, unmask_diagram_blocks
from adockroki.diagrams.include_expander import DiagramIncludeExpander
from adockroki.kroki.client import KrokiClient
from adockroki.logging.context import clear_context, set_render_context
from adockroki.pipeline.diagram_pipeline import DiagramPipeline

if TYPE_CHECKING:
    import httpx

    from adockroki.cache.base_cache_store import BaseCacheStore
    from adockroki.config.settings import Settings
    from adockroki.store.base_store import BaseDocumentStore

logger = logging.getLogger(__name__)

Converter = Callable[[str], str]


async def compose_document(
    store: BaseDocumentStore,
    resolver: IncludeResolver,
    path: str,
    state: CompositionState | None = None,
) -> tuple[str, CompositionState]:
    """Read the root document and expand its include directives.

    Diagram blocks of the root are masked while includes are expanded, so
    include lines inside a root diagram body are left for the diagram stage.

    Raises:
        FileNotFoundError: path does not resolve in the store.
    """
    canonical = await store.resolve(path)
    if canonical is None:
        raise FileNotFoundError(path)

    if state is None:
        state = CompositionState()
    state.dependencies.add(canonical)

    text = await store.read_text(canonical)
    masked, mapping = mask_diagram_blocks(text)
    expanded = await resolver.expand(masked, canonical, 0, 0, state)
    return unmask_diagram_blocks(expanded, mapping), state


class DocumentRenderer:
    """Composes a document and renders its diagrams.

    Usage:
        async with await DocumentRenderer.open(settings, store) as renderer:
            result = await renderer.render("docs/index.adoc")
    """

    def __init__(
        self,
        settings: Settings,
        store: BaseDocumentStore,
        client: KrokiClient,
        cache: RenderCache | None = None,
        cache_store: BaseCacheStore | None = None,
        converter: Converter | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._client = client
        self._cache = cache if cache is not None else RenderCache()
        self._cache_store = cache_store
        self._converter = converter

        self._includes = IncludeResolver(
            store,
            max_depth=settings.include_max_depth,
            insert_markers=settings.include_markers,
            default_extension=settings.default_document_extension,
        )
        self._diagrams = DiagramPipeline(
            client=client,
            cache=self._cache,
            include_expander=DiagramIncludeExpander(
                store,
                max_depth=settings.diagram_include_max_depth,
                document_extension=settings.default_document_extension,
            ),
            enabled_kinds=settings.enabled_diagram_types_list,
            default_format=settings.default_format,
            cache_max_items=settings.cache_max_items,
        )

    @classmethod
    async def open(
        cls,
        settings: Settings,
        store: BaseDocumentStore,
        converter: Converter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> DocumentRenderer:
        """Build a renderer from settings, loading the persisted cache."""
        cache_store = create_cache_store(settings)
        cache = RenderCache(await cache_store.load())
        client = KrokiClient(
            settings.kroki_base_url,
            timeout=settings.timeout_seconds,
            user_agent=settings.user_agent,
            transport=transport,
        )
        logger.debug(
            "Renderer ready: kroki=%s, %d cached diagrams", client.base_url, len(cache)
        )
        return cls(
            settings, store, client,
            cache=cache, cache_store=cache_store, converter=converter,
        )

    @property
    def cache(self) -> RenderCache:
        return self._cache

    async def compose(
        self, path: str, state: CompositionState | None = None
    ) -> tuple[str, CompositionState]:
        """Read path and expand its includes, leaving diagram bodies untouched."""
        return await compose_document(self._store, self._includes, path, state)

    async def render(self, path: str, generation: int = 0) -> RenderResult:
        """Run a complete render for the document at path.

        Raises:
            FileNotFoundError: The root document does not exist.
        """
        set_render_context(path, generation)
        try:
            return await self._render(path, generation)
        finally:
            clear_context()

    async def _render(self, path: str, generation: int) -> RenderResult:
        start = time.monotonic()

        composed, state = await self.compose(path)
        canonical = state.stack[0] if state.stack else path

        run = await self._diagrams.process(
            composed, canonical, state.dependencies, seen_once=set()
        )

        if run.stats.cache_changed and self._cache_store is not None:
            await self._cache_store.save(self._cache.data)

        markup = self._converter(run.text) if self._converter else None

        logger.info(
            "Rendered %s: %d dependencies, %d diagrams, %.0fms",
            canonical,
            len(state.dependencies),
            run.stats.blocks_seen,
            (time.monotonic() - start) * 1000,
        )
        return RenderResult(
            document_path=canonical,
            text=run.text,
            markup=markup,
            dependencies=set(state.dependencies),
            generation=generation,
            stats=run.stats,
            outcomes=run.outcomes,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> DocumentRenderer:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
