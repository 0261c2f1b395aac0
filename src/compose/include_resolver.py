# src/compose/include_resolver.py — v1
"""Recursive expansion of AsciiDoc include:: directives.

Directive problems never abort composition; they are written into the
output as ``// [include] ...`` comment lines:
  - NOT FOUND        target missing and not opts=optional
  - CYCLE DETECTED   target already on the current inclusion stack
  - maxDepth reached nesting deeper than the configured limit
  - READ ERROR       target exists but is not readable UTF-8 text

Heading offsets accumulate from parent to child. Each included subtree is
shifted exactly once by its cumulative offset; blocks spliced in from
deeper includes are held behind placeholder tokens while their parent's
own lines are shifted, so they are never shifted a second time.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from adockroki.compose.include_options import (
    apply_include_options,
    parse_include_options,
    shift_heading_levels,
)
from adockroki.compose.paths import (
    DEFAULT_DOCUMENT_EXTENSION,
    resolve_path,
    strip_quotes,
)
from adockroki.core.models import IncludeDirective
from adockroki.store.base_store import BaseDocumentStore

logger = logging.getLogger(__name__)

INCLUDE_RE = re.compile(
    r"^[ \t\ufeff]*include::\s*(.+?)\[(.*?)\][ \t]*(?:(?://|#|;).*)?\r?$",
    re.MULTILINE,
)
_INCLUDE_START_RE = re.compile(r"^[ \t\ufeff]*include::", re.IGNORECASE)
_NEWLINE_RE = re.compile(r"\r?\n")

# Private-use code points: cannot collide with heading or directive syntax.
_TOKEN_FMT = "\ue000include-block-{}\ue001"
_TOKEN_RE = re.compile("\ue000include-block-(\\d+)\ue001")

DEFAULT_MAX_DEPTH = 30


@dataclass
class CompositionState:
    """Mutable state owned by one composition run.

    ``dependencies`` only grows. ``stack`` holds the paths currently being
    expanded, root first.
    """

    dependencies: set[str] = field(default_factory=set)
    stack: list[str] = field(default_factory=list)
    _blocks: dict[int, str] = field(default_factory=dict, repr=False)

    def park(self, block: str) -> str:
        """Store an expanded block and return the placeholder standing for it."""
        n = len(self._blocks)
        self._blocks[n] = block
        return _TOKEN_FMT.format(n)

    def unpark(self, text: str) -> str:
        """Replace placeholders with their blocks (recursively nested ones too)."""
        while _TOKEN_RE.search(text):
            text = _TOKEN_RE.sub(lambda m: self._blocks[int(m.group(1))], text)
        return text


def join_broken_include_macros(text: str) -> str:
    """Rejoin include directives whose attribute list was wrapped.

    ``include::a.adoc[lines=2;5.`` followed by ``.6]`` becomes
    ``include::a.adoc[lines=2;5..6]``. Text without a wrapped directive is
    returned unchanged, line endings included.
    """
    lines = _NEWLINE_RE.split(text)
    out: list[str] = []
    changed = False
    i = 0

    while i < len(lines):
        line = lines[i]
        if _INCLUDE_START_RE.match(line) and "]" not in line:
            buf = line
            j = i + 1
            while j < len(lines) and "]" not in buf:
                buf += lines[j].strip()
                j += 1
            if "]" in buf:
                out.append(buf)
                changed = True
                i = j
                continue
        out.append(line)
        i += 1

    return "\n".join(out) if changed else text


def parse_directive(match: re.Match[str]) -> IncludeDirective:
    target = strip_quotes(match.group(1).strip())
    return IncludeDirective(
        raw=match.group(0),
        target=target,
        options=parse_include_options(match.group(2)),
    )


class IncludeResolver:
    """Expands include:: directives against a document store."""

    def __init__(
        self,
        store: BaseDocumentStore,
        max_depth: int = DEFAULT_MAX_DEPTH,
        insert_markers: bool = True,
        default_extension: str = DEFAULT_DOCUMENT_EXTENSION,
    ) -> None:
        self._store = store
        self._max_depth = max_depth
        self._insert_markers = insert_markers
        self._default_extension = default_extension

    @property
    def max_depth(self) -> int:
        return self._max_depth

    async def expand(
        self,
        text: str,
        current_path: str,
        inherited_level_offset: int = 0,
        depth: int = 0,
        state: CompositionState | None = None,
    ) -> str:
        """Expand every include directive in text.

        Args:
            text: Source text of the document at current_path.
            current_path: Store path that relative targets resolve against.
            inherited_level_offset: Cumulative leveloffset of enclosing includes.
            depth: Current nesting depth (root = 0).
            state: Shared run state; a fresh one is created when omitted.

        Returns:
            Text with includes spliced in. The text itself is not shifted by
            inherited_level_offset; the caller owns that shift.
        """
        if state is None:
            state = CompositionState()
        if not state.stack:
            state.stack.append(current_path)
        body = await self._expand_body(
            text, current_path, inherited_level_offset, depth, state
        )
        return state.unpark(body)

    async def _expand_body(
        self,
        text: str,
        current_path: str,
        inherited: int,
        depth: int,
        state: CompositionState,
    ) -> str:
        if depth > self._max_depth:
            logger.warning(
                "Include depth %d exceeds limit %d at %s",
                depth, self._max_depth, current_path,
            )
            return (
                f"\n// [include] maxDepth reached ({self._max_depth}) "
                f"at {current_path}\n" + text
            )

        text = join_broken_include_macros(text)

        out: list[str] = []
        last = 0
        for match in INCLUDE_RE.finditer(text):
            out.append(text[last : match.start()])
            directive = parse_directive(match)
            out.append(
                await self._include(directive, current_path, inherited, depth, state)
            )
            last = match.end()

        out.append(text[last:])
        return "".join(out)

    async def _include(
        self,
        directive: IncludeDirective,
        current_path: str,
        inherited: int,
        depth: int,
        state: CompositionState,
    ) -> str:
        opts = directive.options
        target = directive.target.split("#", 1)[0].strip()
        resolved = resolve_path(current_path, target, self._default_extension)
        canonical = await self._store.resolve(resolved) if resolved else None

        logger.debug(
            "include matched: %r target=%s resolved=%s", directive.raw, target, canonical
        )

        if canonical is None:
            if opts.optional:
                return ""
            logger.info("Include not found: %s (from %s)", directive.target, current_path)
            return (
                f"\n// [include] NOT FOUND: {directive.target} "
                f"(resolved: {resolved or '-'})\n"
            )

        state.dependencies.add(canonical)

        if canonical in state.stack:
            logger.warning("Include cycle: %s -> %s", current_path, canonical)
            return f"\n// [include] CYCLE DETECTED: {canonical}\n"

        try:
            content = await self._store.read_text(canonical)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Include unreadable: %s (%s)", canonical, e)
            return f"\n// [include] READ ERROR: {canonical} ({e})\n"
        content = apply_include_options(content.lstrip("\ufeff"), opts)

        total_offset = inherited + (opts.leveloffset or 0)

        state.stack.append(canonical)
        try:
            body = await self._expand_body(
                content, canonical, total_offset, depth + 1, state
            )
        finally:
            state.stack.pop()

        if total_offset != 0:
            logger.debug("leveloffset %+d applied to %s", total_offset, canonical)
            body = shift_heading_levels(body, total_offset)

        if self._insert_markers:
            body = (
                f"\n// --- include begin: {canonical} ---\n"
                f"{body}"
                f"\n// --- include end: {canonical} ---\n"
            )
        return state.park(body)
