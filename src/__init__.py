# src/__init__.py — v1
"""adockroki — AsciiDoc composition and Kroki diagram rendering pipeline."""

from adockroki.version import __version__

__all__ = ["__version__"]
