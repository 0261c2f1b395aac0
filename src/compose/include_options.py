# src/compose/include_options.py — v1
"""Parse include:: attributes and apply them to raw included content.

Selection (lines, tag/tags, indent) always runs on the target's original
text, before any nested include in it is expanded.
"""

from __future__ import annotations

import re

from adockroki.compose.paths import strip_quotes
from adockroki.core.models import IncludeOptions

_KEY_RE = re.compile(r"([A-Za-z0-9_-]+)\s*=")
_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_LIST_SPLIT_RE = re.compile(r"[;,|]")
_RANGE_RE = re.compile(r"^(\d+)\s*\.\.\s*(\d+)$")
_HEADING_RE = re.compile(r"^\s*=+\s+")
_SHIFT_RE = re.compile(r"^(\s*)(=+)(\s+.*)$")
_TAG_START_RE = re.compile(r"^\s*tag::([A-Za-z0-9_.:-]+)\[\]\s*$")
_TAG_END_RE = re.compile(r"^\s*end::([A-Za-z0-9_.:-]+)\[\]\s*$")
_NEWLINE_RE = re.compile(r"\r?\n")


def _parse_int(value: str) -> int | None:
    match = _INT_RE.match(value)
    return int(match.group(1)) if match else None


def _split_list(value: str) -> list[str]:
    return [x.strip() for x in _LIST_SPLIT_RE.split(value) if x.strip()]


def tokenize_key_values(raw: str) -> list[tuple[str, str]]:
    """Split "lines=2;5..6,leveloffset=+1" into key/value pairs.

    A value runs until the next ``key=``, so separators inside values
    (``;`` in lines specs) survive.
    """
    hits = [(m.group(1), m.start(), m.end()) for m in _KEY_RE.finditer(raw)]
    pairs: list[tuple[str, str]] = []
    for i, (key, _start, end) in enumerate(hits):
        stop = hits[i + 1][1] if i + 1 < len(hits) else len(raw)
        val = raw[end:stop].strip()
        val = re.sub(r"[,;]+$", "", val).strip()
        val = re.sub(r"^[,;]+\s*", "", val)
        pairs.append((key, val))
    return pairs


def parse_include_options(raw: str) -> IncludeOptions:
    """Parse the bracket content of an include directive.

    Unknown keys are ignored; malformed integers leave the option unset.
    """
    opts = IncludeOptions()
    if not (raw or "").strip():
        return opts

    for key, val in tokenize_key_values(raw.strip()):
        k = key.lower()
        v = strip_quotes(val)
        if k == "leveloffset":
            opts.leveloffset = _parse_int(v)
        elif k == "lines":
            opts.lines = v
        elif k == "tag":
            opts.tag = v
        elif k == "tags":
            opts.tags = _split_list(v)
        elif k == "indent":
            n = _parse_int(v)
            opts.indent = n if n is not None and n >= 0 else None
        elif k == "opts":
            if "optional" in (f.lower() for f in _split_list(v)):
                opts.optional = True
    return opts


def parse_line_spec(spec: str) -> set[int]:
    """Return the 1-based line numbers named by a lines spec."""
    picked: set[int] = set()
    for part in _split_list(spec or ""):
        rng = _RANGE_RE.match(part)
        if rng:
            a, b = int(rng.group(1)), int(rng.group(2))
            picked.update(range(min(a, b), max(a, b) + 1))
        elif part.isdigit():
            picked.add(int(part))
    return picked


def pick_lines(text: str, spec: str) -> str:
    """Keep the lines named by spec, in original order.

    A blank line separates non-contiguous runs and precedes any heading
    that would otherwise continue the previous paragraph.
    """
    picked = parse_line_spec(spec)
    out: list[str] = []
    prev: int | None = None

    for lineno, line in enumerate(_NEWLINE_RE.split(text), start=1):
        if lineno not in picked:
            continue
        if prev is not None and lineno != prev + 1 and out and out[-1] != "":
            out.append("")
        if _HEADING_RE.match(line) and out and out[-1] != "":
            out.append("")
        out.append(line)
        prev = lineno

    return "\n".join(out)


def pick_tags(text: str, wanted: set[str]) -> str:
    """Keep lines inside tag::NAME[] ... end::NAME[] regions for wanted names.

    Any end marker closes capture, whatever name it carries, so nested
    regions with different names are not supported.
    """
    out: list[str] = []
    capturing = False

    for line in _NEWLINE_RE.split(text):
        start = _TAG_START_RE.match(line)
        if start:
            capturing = start.group(1).strip() in wanted
            continue
        if _TAG_END_RE.match(line):
            capturing = False
            continue
        if capturing:
            out.append(line)

    return "\n".join(out)


def indent_lines(text: str, indent: int) -> str:
    """Prefix every non-empty line with indent spaces."""
    if indent <= 0:
        return text
    pad = " " * indent
    return "\n".join(pad + ln if ln else ln for ln in _NEWLINE_RE.split(text))


def apply_include_options(text: str, opts: IncludeOptions) -> str:
    """Apply lines, tag/tags and indent selection to raw included content."""
    out = text
    if opts.lines:
        out = pick_lines(out, opts.lines)

    if opts.tag:
        out = pick_tags(out, {opts.tag})
    elif opts.tags:
        out = pick_tags(out, set(opts.tags))

    if opts.indent:
        out = indent_lines(out, opts.indent)
    return out


def shift_heading_levels(text: str, offset: int) -> str:
    """Shift "=" section headings by offset, never below one marker."""
    if offset == 0:
        return text

    out: list[str] = []
    for line in _NEWLINE_RE.split(text):
        match = _SHIFT_RE.match(line)
        if not match:
            out.append(line)
            continue
        indent, markers, rest = match.groups()
        level = max(1, len(markers) + offset)
        out.append(indent + "=" * level + rest)
    return "\n".join(out)
