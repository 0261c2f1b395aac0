# src/diagrams/classifier.py — v1
"""Detect error images that Kroki returns with a 2xx status.

A response is a disguised failure only when it contains a known error
phrase AND draws almost nothing. Phrase alone would flag diagrams that
mention "parse error" in their labels; shape count alone would flag
legitimately tiny diagrams.
"""

from __future__ import annotations

import re

# Only the head of the document is inspected.
SCAN_LIMIT = 12000

MAX_SHAPES_FOR_ERROR = 1

ERROR_PHRASES: tuple[str, ...] = (
    "parse error",
    "syntax error",
    "lexical error",
    "unexpected token",
    "failed to parse",
    "cannot parse",
    "diagram syntax error",
)

_SHAPE_RE = re.compile(r"<(?:path|rect|polygon|line)\b", re.IGNORECASE)

DISGUISED_FAILURE_MESSAGE = "Diagram syntax error (reported by Kroki)"


def has_error_phrase(svg_text: str) -> bool:
    head = svg_text[:SCAN_LIMIT].lower()
    return any(phrase in head for phrase in ERROR_PHRASES)


def count_shapes(svg_text: str) -> int:
    """Count drawing primitives (path, rect, polygon, line) in the scanned head."""
    return len(_SHAPE_RE.findall(svg_text[:SCAN_LIMIT]))


def is_likely_error_svg(svg_text: str) -> bool:
    """Return True when an SVG body looks like a rendered error message."""
    if not has_error_phrase(svg_text):
        return False
    return count_shapes(svg_text) <= MAX_SHAPES_FOR_ERROR
