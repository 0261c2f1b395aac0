# src/compose/paths.py — v1
"""Resolve include targets against the including document's path.

Pure string manipulation: no store access, no filesystem access.
"""

from __future__ import annotations

import posixpath
import re

_REMOTE_RE = re.compile(r"^<?https?://", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]+$")

DEFAULT_DOCUMENT_EXTENSION = ".adoc"


def strip_quotes(value: str) -> str:
    """Remove one pair of matching surrounding quotes."""
    t = (value or "").strip()
    if len(t) >= 2 and t[0] == t[-1] and t[0] in ("'", '"'):
        return t[1:-1].strip()
    return t


def unwrap_angle_brackets(value: str) -> str:
    t = value.strip()
    if t.startswith("<") and t.endswith(">"):
        return t[1:-1].strip()
    return t


def is_remote_like(target: str) -> bool:
    """True for http(s) URLs, optionally wrapped in angle brackets."""
    return bool(_REMOTE_RE.match((target or "").strip()))


def has_extension(path: str) -> bool:
    return bool(_EXTENSION_RE.search(path))


def extension_of(path: str) -> str:
    """Lower-cased extension without the dot, or '' if none."""
    match = _EXTENSION_RE.search(posixpath.basename(path))
    return match.group(0)[1:].lower() if match else ""


def resolve_path(
    current_path: str,
    target: str,
    default_extension: str | None = DEFAULT_DOCUMENT_EXTENSION,
) -> str | None:
    """Resolve target relative to current_path into a canonical store path.

    Args:
        current_path: Store path of the including document.
        target: Raw include target (quotes already stripped).
        default_extension: Appended when target has no extension; None disables.

    Returns:
        Normalized store path, or None for remote, empty or root-escaping targets.
    """
    t = (target or "").replace("\\", "/").strip()
    if not t or is_remote_like(t):
        return None

    if t.startswith("/"):
        t = t.lstrip("/")
    else:
        base_dir = posixpath.dirname(current_path.replace("\\", "/"))
        t = posixpath.join(base_dir, t) if base_dir else t

    if default_extension and not has_extension(t):
        t += default_extension

    normalized = posixpath.normpath(t)
    if normalized in (".", "") or normalized == ".." or normalized.startswith("../"):
        return None
    return normalized.lstrip("/")
