# src/cache/fingerprint.py — v1
"""Content-addressed cache keys for rendered diagrams."""

from __future__ import annotations

import hashlib

_MIME_BY_FORMAT = {"svg": "image/svg+xml", "png": "image/png"}


def compute_fingerprint(diagram_kind: str, output_format: str, source: str) -> str:
    """SHA-256 hex of kind, format and fully resolved source, newline-joined."""
    key = f"{diagram_kind}\n{output_format}\n{source}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def mime_for(output_format: str) -> str:
    return _MIME_BY_FORMAT.get(output_format, "application/octet-stream")
