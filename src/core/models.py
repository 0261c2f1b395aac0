# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DiagramFormat = Literal["svg", "png"]


# === INCLUDES ===


class IncludeOptions(BaseModel):
    """Attributes parsed from the bracket part of an include:: directive."""

    leveloffset: int | None = None
    lines: str | None = None
    tag: str | None = None
    tags: list[str] = Field(default_factory=list)
    indent: int | None = None
    optional: bool = False


class IncludeDirective(BaseModel):
    """One include:: occurrence (after broken-line joining)."""

    raw: str
    target: str
    options: IncludeOptions = Field(default_factory=IncludeOptions)


# === DIAGRAMS ===


class DiagramBlock(BaseModel):
    """A diagram definition block found in a composed document.

    ``start``/``end`` are offsets of ``raw`` in the text that was scanned, so
    substitution never depends on searching for ``raw`` again.
    """

    raw: str
    diagram_kind: str
    output_format: DiagramFormat = "svg"
    source: str
    start: int
    end: int

    @property
    def line_ending(self) -> str:
        """Line break consumed after the closing delimiter (may be empty)."""
        return self.raw[len(self.raw.rstrip("\r\n")) :]


class RenderedDiagram(BaseModel):
    """Payload returned by the render-with-cache step."""

    mime: str
    data: bytes
    cache_key: str
    from_cache: bool = False


class BlockOutcome(BaseModel):
    """What happened to one diagram block during a pipeline run."""

    diagram_kind: str
    output_format: DiagramFormat
    status: Literal["rendered", "cached", "error", "skipped"]
    message: str | None = None
    submitted_source: str | None = None


# === RUN RESULTS ===


class RenderStats(BaseModel):
    """Counters for one pipeline run."""

    blocks_seen: int = 0
    rendered: int = 0
    cache_hits: int = 0
    network_calls: int = 0
    failures: int = 0
    skipped: int = 0
    cache_changed: bool = False


class DiagramRunResult(BaseModel):
    """Output of DiagramPipeline.process for one composed document."""

    text: str
    stats: RenderStats = Field(default_factory=RenderStats)
    outcomes: list[BlockOutcome] = Field(default_factory=list)


class RenderResult(BaseModel):
    """Output of a full document render run."""

    document_path: str
    text: str
    markup: str | None = None
    dependencies: set[str] = Field(default_factory=set)
    generation: int = 0
    stats: RenderStats = Field(default_factory=RenderStats)
    outcomes: list[BlockOutcome] = Field(default_factory=list)


# === DOCUMENT STORE EVENTS ===


class FileChangeEvent(BaseModel):
    """Change notification from the document store."""

    kind: Literal["modified", "renamed", "deleted"]
    path: str
    old_path: str | None = None

    @property
    def touched_paths(self) -> set[str]:
        paths = {self.path}
        if self.old_path:
            paths.add(self.old_path)
        return paths
