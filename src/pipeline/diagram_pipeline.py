# src/pipeline/diagram_pipeline.py — v1
"""Diagram pipeline — render every allow-listed diagram block of a document.

Per block, in document order:
  1. PlantUML only: expand include::/!include directives in the body
  2. Look up (kind, format, source) in the render cache; on miss call Kroki
     and store the payload, trimming the cache if it outgrew its limit
  3. Classify the payload (disguised failure heuristic, SVG only)
  4. Substitute an image wrapper or an error wrapper at the block's span

No failure here aborts the document: the worst case for a block is a
visible error wrapper.
"""

from __future__ import annotations

import logging

from adockroki.cache.render_cache import RenderCache
from adockroki.core.models import (
    BlockOutcome,
    DiagramBlock,
    DiagramFormat,
    DiagramRunResult,
    RenderStats,
)
from adockroki.diagrams.classifier import DISGUISED_FAILURE_MESSAGE, is_likely_error_svg
from adockroki.diagrams.extractor import extract_diagram_blocks, substitute_blocks
from adockroki.diagrams.html import (
    build_diagram_html,
    build_error_html,
    build_png_html,
    passthrough,
)
from adockroki.diagrams.include_expander import (
    DiagramIncludeDepthError,
    DiagramIncludeExpander,
    DiagramIncludeReadError,
    MissingIncludeError,
)
from adockroki.kroki.cached_render import render_with_cache
from adockroki.kroki.client import KrokiClient, KrokiRenderError
from adockroki.logging.context import set_diagram_context

logger = logging.getLogger(__name__)

PLANTUML_KIND = "plantuml"

DEFAULT_ENABLED_KINDS = ("plantuml", "mermaid", "graphviz")


def _reject_svg(data: bytes) -> bool:
    return is_likely_error_svg(data.decode("utf-8", errors="replace"))


class DiagramPipeline:
    """Renders diagram blocks of a composed document through Kroki.

    Usage:
        pipeline = DiagramPipeline(client, cache, expander)
        run = await pipeline.process(text, "docs/index.adoc", deps, seen_once)
    """

    def __init__(
        self,
        client: KrokiClient,
        cache: RenderCache,
        include_expander: DiagramIncludeExpander | None = None,
        enabled_kinds: list[str] | tuple[str, ...] = DEFAULT_ENABLED_KINDS,
        default_format: DiagramFormat = "svg",
        cache_max_items: int = 300,
    ) -> None:
        self._client = client
        self._cache = cache
        self._expander = include_expander
        self._enabled = set(enabled_kinds)
        self._default_format = default_format
        self._cache_max_items = cache_max_items

    @property
    def cache(self) -> RenderCache:
        return self._cache

    async def process(
        self,
        text: str,
        current_path: str,
        dependencies: set[str] | None = None,
        seen_once: set[str] | None = None,
    ) -> DiagramRunResult:
        """Render all allow-listed diagram blocks and substitute the results.

        Args:
            text: Fully include-expanded document text.
            current_path: Store path that diagram include targets resolve against.
            dependencies: Run dependency set; include targets are added to it.
            seen_once: Run-wide set backing !include_once.

        Returns:
            DiagramRunResult with substituted text, counters and per-block outcomes.
        """
        deps = dependencies if dependencies is not None else set()
        once = seen_once if seen_once is not None else set()
        stats = RenderStats()
        outcomes: list[BlockOutcome] = []
        replacements: list[tuple[DiagramBlock, str]] = []

        for block in extract_diagram_blocks(text, self._default_format):
            stats.blocks_seen += 1
            if block.diagram_kind not in self._enabled:
                stats.skipped += 1
                outcomes.append(BlockOutcome(
                    diagram_kind=block.diagram_kind,
                    output_format=block.output_format,
                    status="skipped",
                ))
                continue

            set_diagram_context(block.diagram_kind)
            try:
                html, outcome = await self._render_block(
                    block, current_path, deps, once, stats
                )
            finally:
                set_diagram_context(None)
            replacements.append((block, passthrough(html) + block.line_ending))
            outcomes.append(outcome)

        logger.info(
            "Diagram pass: %d blocks, %d rendered, %d cached, %d failed, %d skipped",
            stats.blocks_seen, stats.rendered, stats.cache_hits,
            stats.failures, stats.skipped,
        )
        return DiagramRunResult(
            text=substitute_blocks(text, replacements) if replacements else text,
            stats=stats,
            outcomes=outcomes,
        )

    async def _render_block(
        self,
        block: DiagramBlock,
        current_path: str,
        deps: set[str],
        once: set[str],
        stats: RenderStats,
    ) -> tuple[str, BlockOutcome]:
        kind = block.diagram_kind
        fmt = block.output_format
        source = block.source
        calls_before = self._client.request_count
        size_before = len(self._cache)

        try:
            if kind == PLANTUML_KIND and self._expander is not None:
                source = await self._expander.expand(block.source, current_path, deps, once)

            rendered = await render_with_cache(
                self._client, self._cache, kind, fmt, source,
                reject=_reject_svg if fmt == "svg" else None,
            )
        except (
            KrokiRenderError,
            MissingIncludeError,
            DiagramIncludeReadError,
            DiagramIncludeDepthError,
        ) as e:
            stats.network_calls += self._client.request_count - calls_before
            stats.failures += 1
            logger.warning("Diagram render failed (%s/%s): %s", kind, fmt, e)
            return (
                build_error_html(kind, fmt, str(e), source),
                BlockOutcome(
                    diagram_kind=kind, output_format=fmt, status="error",
                    message=str(e), submitted_source=source,
                ),
            )

        stats.network_calls += self._client.request_count - calls_before
        if rendered.from_cache:
            stats.cache_hits += 1
        elif len(self._cache) != size_before:
            stats.cache_changed = True
            self._cache.trim(self._cache_max_items)

        if fmt == "svg":
            svg_text = rendered.data.decode("utf-8", errors="replace")
            if is_likely_error_svg(svg_text):
                stats.failures += 1
                logger.warning("Kroki returned an error image for a %s block", kind)
                return (
                    build_error_html(kind, fmt, DISGUISED_FAILURE_MESSAGE, source),
                    BlockOutcome(
                        diagram_kind=kind, output_format=fmt, status="error",
                        message=DISGUISED_FAILURE_MESSAGE, submitted_source=source,
                    ),
                )
            html = build_diagram_html(svg_text, kind, source)
        else:
            html = build_png_html(rendered.data, kind)

        if not rendered.from_cache:
            stats.rendered += 1
        return html, BlockOutcome(
            diagram_kind=kind,
            output_format=fmt,
            status="cached" if rendered.from_cache else "rendered",
            submitted_source=source,
        )
