# src/diagrams/extractor.py — v1
"""Find diagram blocks in a composed AsciiDoc document.

A block is an attribute line ``[kind, key=value, ...]``, optional blank
lines, a ``----`` opening delimiter, the body, and a ``----`` closing
delimiter. Extraction is stateless: each call re-scans the whole text.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from adockroki.core.models import DiagramBlock, DiagramFormat

BLOCK_RE = re.compile(
    r"^\[([^\]\n]+)\][ \t]*\r?\n(?:[ \t]*\r?\n)*----[ \t]*\r?\n(.*?)\r?\n----[ \t]*(?:\r?\n|$)",
    re.MULTILINE | re.DOTALL,
)
_FORMAT_RE = re.compile(r"^format\s*=\s*(svg|png)\s*$", re.IGNORECASE)

MASK_TOKEN = "@@KROKI_BLOCK_{}@@"


def parse_block_attributes(attr: str) -> tuple[str, DiagramFormat | None]:
    """Split "plantuml, format=png, role=x" into kind and explicit format."""
    parts = [p.strip() for p in attr.split(",")]
    kind = parts[0]
    fmt: DiagramFormat | None = None
    for part in parts[1:]:
        match = _FORMAT_RE.match(part)
        if match:
            fmt = match.group(1).lower()  # type: ignore[assignment]
    return kind, fmt


def extract_diagram_blocks(
    text: str, default_format: DiagramFormat = "svg"
) -> Iterator[DiagramBlock]:
    """Yield diagram blocks in document order.

    Blocks whose attribute line has an empty first token are skipped.
    """
    for match in BLOCK_RE.finditer(text):
        kind, fmt = parse_block_attributes(match.group(1).strip())
        if not kind:
            continue
        yield DiagramBlock(
            raw=match.group(0),
            diagram_kind=kind,
            output_format=fmt or default_format,
            source=match.group(2),
            start=match.start(),
            end=match.end(),
        )


def substitute_blocks(text: str, replacements: list[tuple[DiagramBlock, str]]) -> str:
    """Replace each block's span with its replacement.

    Spans must come from a scan of this exact text; they are applied back to
    front so earlier offsets stay valid.
    """
    out = text
    for block, replacement in sorted(replacements, key=lambda r: r[0].start, reverse=True):
        if out[block.start : block.end] != block.raw:
            raise ValueError(
                f"Block span {block.start}:{block.end} no longer matches the document"
            )
        out = out[: block.start] + replacement + out[block.end :]
    return out


def mask_diagram_blocks(text: str) -> tuple[str, dict[str, str]]:
    """Hide diagram blocks behind tokens so include expansion cannot touch them."""
    mapping: dict[str, str] = {}
    replacements: list[tuple[DiagramBlock, str]] = []
    for i, block in enumerate(extract_diagram_blocks(text)):
        token = MASK_TOKEN.format(i)
        tail = block.line_ending
        mapping[token] = block.raw[: len(block.raw) - len(tail)]
        replacements.append((block, token + tail))
    return substitute_blocks(text, replacements), mapping


def unmask_diagram_blocks(text: str, mapping: dict[str, str]) -> str:
    """Restore blocks hidden by mask_diagram_blocks."""
    out = text
    for token, raw in mapping.items():
        out = out.replace(token, raw, 1)
    return out
