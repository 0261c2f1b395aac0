# src/logging/context.py — v1
"""Contextual logging support — attach document path, render generation and
diagram kind to log records.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging — set per render run.
_document_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_path", default=None
)
_generation: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "generation", default=None
)
_diagram_kind: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "diagram_kind", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    document_path: str | None = None
    generation: int | None = None
    diagram_kind: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        document_path=_document_path.get(),
        generation=_generation.get(),
        diagram_kind=_diagram_kind.get(),
    )


def set_render_context(document_path: str, generation: int | None = None) -> None:
    """Set document-level context (called once per render run)."""
    _document_path.set(document_path)
    _generation.set(generation)


def set_diagram_context(diagram_kind: str | None) -> None:
    """Set block-level context (called per diagram block)."""
    _diagram_kind.set(diagram_kind)


def clear_context() -> None:
    """Reset all context variables."""
    _document_path.set(None)
    _generation.set(None)
    _diagram_kind.set(None)
