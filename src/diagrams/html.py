# src/diagrams/html.py — v1
"""Passthrough HTML fragments substituted in place of diagram blocks."""

from __future__ import annotations

import base64
import html
import re

_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193

_PASSTHROUGH_RE = re.compile(
    r"^\+\+\+\+\r?\n(.*?)\r?\n\+\+\+\+[ \t]*$", re.MULTILINE | re.DOTALL
)


def escape_html(value: str) -> str:
    return html.escape(value, quote=True).replace("&#x27;", "&#39;")


def fnv1a_32(text: str) -> str:
    """32-bit FNV-1a over UTF-16 code units, as lowercase hex."""
    h = _FNV_OFFSET
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return format(h, "x")


def passthrough(fragment: str) -> str:
    """Wrap raw HTML in an AsciiDoc passthrough block."""
    return f"++++\n{fragment}\n++++"


def build_diagram_html(svg_text: str, diagram_kind: str, source: str) -> str:
    """Inline SVG wrapper with a stable id and a searchable copy of the source."""
    kind = escape_html(diagram_kind)
    diagram_id = f"kroki-{kind}-{fnv1a_32(source)[:8]}"
    index_html = (
        f'<div class="kroki-search-index" aria-hidden="true">{escape_html(source)}</div>'
        if source
        else ""
    )
    return (
        f'<div class="kroki-diagram-wrap" id="{diagram_id}" data-kroki-type="{kind}">\n'
        f'  <div class="kroki-diagram" data-kroki-type="{kind}">{svg_text}</div>\n'
        f"  {index_html}\n"
        f"</div>"
    )


def build_png_html(data: bytes, diagram_kind: str) -> str:
    b64 = base64.b64encode(data).decode("ascii")
    return (
        f'<img class="kroki-diagram" data-kroki-type="{escape_html(diagram_kind)}" '
        f'src="data:image/png;base64,{b64}" />'
    )


def build_error_html(diagram_kind: str, output_format: str, message: str, source: str) -> str:
    kind = escape_html(diagram_kind)
    fmt = escape_html(output_format)
    return (
        f'<div class="kroki-error" data-kroki-type="{kind}" data-kroki-format="{fmt}">\n'
        f'  <div class="kroki-error__head">\n'
        f"    <strong>Kroki render failed</strong>\n"
        f'    <span class="kroki-error__meta">{kind} / {fmt}</span>\n'
        f"  </div>\n"
        f'  <div class="kroki-error__msg">{escape_html(message)}</div>\n'
        f'  <details class="kroki-error__details">\n'
        f"    <summary>Show source</summary>\n"
        f'    <pre class="kroki-error__src">{escape_html(source)}</pre>\n'
        f"  </details>\n"
        f"</div>"
    )


def build_preview_page(text: str, title: str = "") -> str:
    """Standalone HTML page for a rendered document.

    Passthrough blocks are emitted as raw HTML; everything between them is
    shown escaped in ``<pre>`` blocks. Used as the CLI's converter when no
    AsciiDoc processor is wired in.
    """
    parts: list[str] = []
    last = 0
    for match in _PASSTHROUGH_RE.finditer(text):
        chunk = text[last : match.start()].strip("\r\n")
        if chunk:
            parts.append(f'<pre class="adoc-source">{escape_html(chunk)}</pre>')
        parts.append(match.group(1))
        last = match.end()
    tail = text[last:].strip("\r\n")
    if tail:
        parts.append(f'<pre class="adoc-source">{escape_html(tail)}</pre>')

    body = "\n".join(parts)
    return (
        "<!DOCTYPE html>\n"
        '<html>\n<head>\n<meta charset="utf-8">\n'
        f"<title>{escape_html(title)}</title>\n"
        "</head>\n<body>\n"
        f"{body}\n"
        "</body>\n</html>\n"
    )
