# src/diagrams/include_expander.py — v1
"""Expand includes inside a single PlantUML diagram body.

Two directive families are handled in the same body:
  - ``include::path[...]``       AsciiDoc style, attributes ignored
  - ``!include path``            PlantUML native, plus ``!include_once`` and
                                 ``!include_many`` (the latter treated as
                                 ``!include``; no wildcard/multi-file support)

Remote targets are left in place for the renderer to fetch. A missing
local target raises MissingIncludeError and an unreadable one raises
DiagramIncludeReadError; either fails only the diagram block being expanded.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable

from adockroki.compose.paths import (
    DEFAULT_DOCUMENT_EXTENSION,
    extension_of,
    is_remote_like,
    resolve_path,
    strip_quotes,
    unwrap_angle_brackets,
)
from adockroki.store.base_store import BaseDocumentStore

logger = logging.getLogger(__name__)

ADOC_INCLUDE_RE = re.compile(
    r"^[ \t]*include::[ \t]*([^\[\n]+?)[ \t]*\[[^\n]*?\][ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)
PUML_INCLUDE_RE = re.compile(
    r"^[ \t]*!(include|include_once|include_many)[ \t]+(.+?)[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)
_TRAILING_COMMENT_RE = re.compile(r"\s+//|\s+;")

DEFAULT_MAX_DEPTH = 20


class MissingIncludeError(FileNotFoundError):
    """A local include target inside a diagram does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Included file not found: {path}")
        self.path = path


class DiagramIncludeDepthError(RecursionError):
    """Diagram include nesting exceeded the configured limit."""


class DiagramIncludeReadError(OSError):
    """A local include target inside a diagram exists but cannot be read as UTF-8 text."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Included file could not be read: {path} ({reason})")
        self.path = path


async def replace_async(
    pattern: re.Pattern[str],
    text: str,
    replacer: Callable[[re.Match[str]], Awaitable[str]],
) -> str:
    """re.sub with an awaitable replacement, applied left to right."""
    out: list[str] = []
    last = 0
    for match in pattern.finditer(text):
        out.append(text[last : match.start()])
        out.append(await replacer(match))
        last = match.end()
    out.append(text[last:])
    return "".join(out)


class DiagramIncludeExpander:
    """Resolves include directives found in a PlantUML body.

    ``dependencies`` and ``seen_once`` are owned by the caller's render run;
    ``seen_once`` is shared across every block of that run so
    ``!include_once`` holds document-wide.
    """

    def __init__(
        self,
        store: BaseDocumentStore,
        max_depth: int = DEFAULT_MAX_DEPTH,
        document_extension: str = DEFAULT_DOCUMENT_EXTENSION,
    ) -> None:
        self._store = store
        self._max_depth = max_depth
        self._document_ext = document_extension.lstrip(".").lower()

    async def expand(
        self,
        source: str,
        current_path: str,
        dependencies: set[str],
        seen_once: set[str],
        max_depth: int | None = None,
        depth: int = 0,
    ) -> str:
        """Return source with every local include replaced by its content.

        Raises:
            MissingIncludeError: A local target could not be found.
            DiagramIncludeReadError: A local target is not readable UTF-8 text.
            DiagramIncludeDepthError: Nesting went deeper than max_depth.
        """
        limit = self._max_depth if max_depth is None else max_depth
        if depth > limit:
            raise DiagramIncludeDepthError(
                f"PlantUML include nesting too deep (>{limit})"
            )

        async def adoc_directive(match: re.Match[str]) -> str:
            target = strip_quotes(match.group(1))
            if is_remote_like(target):
                return match.group(0)
            return await self._include_file(
                target, current_path, "normal", dependencies, seen_once, limit, depth
            )

        async def puml_directive(match: re.Match[str]) -> str:
            kind = match.group(1).lower()
            path_part = _TRAILING_COMMENT_RE.split(match.group(2))[0].strip()
            if not path_part or is_remote_like(path_part):
                return match.group(0)
            mode = "once" if kind == "include_once" else "normal"
            return await self._include_file(
                path_part, current_path, mode, dependencies, seen_once, limit, depth
            )

        out = await replace_async(ADOC_INCLUDE_RE, source, adoc_directive)
        return await replace_async(PUML_INCLUDE_RE, out, puml_directive)

    async def _resolve(self, current_path: str, raw_target: str) -> str:
        target = unwrap_angle_brackets(strip_quotes(raw_target))
        resolved = resolve_path(current_path, target, default_extension=None)
        canonical = await self._store.resolve(resolved) if resolved else None
        if canonical is None:
            raise MissingIncludeError(resolved or target)
        return canonical

    async def _read(self, canonical: str) -> str:
        try:
            return await self._store.read_text(canonical)
        except (OSError, UnicodeDecodeError) as e:
            raise DiagramIncludeReadError(canonical, str(e)) from e

    async def _include_file(
        self,
        raw_target: str,
        current_path: str,
        mode: str,
        dependencies: set[str],
        seen_once: set[str],
        limit: int,
        depth: int,
    ) -> str:
        canonical = await self._resolve(current_path, raw_target)
        dependencies.add(canonical)

        if mode == "once":
            if canonical in seen_once:
                logger.debug("!include_once skipped, already expanded: %s", canonical)
                return ""
            seen_once.add(canonical)

        content = await self._read(canonical)

        if extension_of(canonical) == self._document_ext:
            content = await self._expand_document_includes(
                content, canonical, dependencies, limit, depth + 1
            )

        return await self.expand(
            content, canonical, dependencies, seen_once, max_depth=limit, depth=depth + 1
        )

    async def _expand_document_includes(
        self,
        text: str,
        current_path: str,
        dependencies: set[str],
        limit: int,
        depth: int,
    ) -> str:
        """Splice AsciiDoc includes of a document pulled into a diagram.

        Heading offsets and selection attributes do not apply inside a
        diagram body; only the bare target is used.
        """
        if depth > limit:
            raise DiagramIncludeDepthError(
                f"AsciiDoc include nesting too deep (>{limit})"
            )

        async def directive(match: re.Match[str]) -> str:
            target = strip_quotes(match.group(1))
            if not target:
                return ""
            if is_remote_like(target):
                return match.group(0)
            canonical = await self._resolve(current_path, target)
            dependencies.add(canonical)
            content = await self._read(canonical)
            return await self._expand_document_includes(
                content, canonical, dependencies, limit, depth + 1
            )

        return await replace_async(ADOC_INCLUDE_RE, text, directive)
