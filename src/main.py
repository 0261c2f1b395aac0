# src/main.py — v1
"""CLI entry point — render, compose, cache commands.

Usage:
    adockroki render <file> --root DIR [-o OUT] [--html]
    adockroki compose <file> --root DIR [-o OUT]
    adockroki cache info|clear
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from adockroki.store.local_store import LocalDocumentStore
from adockroki.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from adockroki.config.settings import ConfigurationError, load_settings
    from adockroki.logging.logger import setup_logging_from_settings

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging_from_settings(settings, verbose=args.verbose)
    args.settings = settings

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="adockroki",
        description=f"adockroki v{__version__} — AsciiDoc composition and Kroki diagrams",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- render ---
    p_render = subparsers.add_parser(
        "render", help="Compose a document and render its diagrams",
    )
    _add_document_args(p_render)
    p_render.add_argument(
        "--html", action="store_true",
        help="Write a standalone HTML preview instead of AsciiDoc",
    )
    p_render.set_defaults(func=_cmd_render)

    # --- compose ---
    p_compose = subparsers.add_parser(
        "compose", help="Expand include:: directives only (no diagram rendering)",
    )
    _add_document_args(p_compose)
    p_compose.set_defaults(func=_cmd_compose)

    # --- cache ---
    p_cache = subparsers.add_parser(
        "cache", help="Inspect or clear the diagram cache",
    )
    p_cache.add_argument("action", choices=["info", "clear"])
    p_cache.set_defaults(func=_cmd_cache)

    return parser


def _add_document_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("file", type=Path, help="Path to the root document")
    p.add_argument(
        "--root", type=Path, default=None,
        help="Vault root that include paths resolve against (default: file's directory)",
    )
    p.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output file (default: stdout)",
    )


def _open_store(args: argparse.Namespace) -> tuple[LocalDocumentStore, str] | None:
    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return None

    root = args.root if args.root is not None else file_path.parent
    store = LocalDocumentStore(root)
    try:
        rel = store.relative_path(file_path)
    except ValueError:
        logger.error("%s is not inside root %s", file_path, store.root)
        return None
    return store, rel


def _write_output(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", output)


async def _cmd_render(args: argparse.Namespace) -> int:
    """Compose the document and render every diagram block."""
    from adockroki.diagrams.html import build_preview_page
    from adockroki.pipeline.document_renderer import DocumentRenderer

    opened = _open_store(args)
    if opened is None:
        return 1
    store, rel = opened

    converter = None
    if args.html:
        def converter(text: str) -> str:
            return build_preview_page(text, title=rel)

    renderer = await DocumentRenderer.open(args.settings, store, converter=converter)
    async with renderer:
        result = await renderer.render(rel)

    _write_output(result.markup if result.markup is not None else result.text, args.output)

    stats = result.stats
    print(
        f"\nRender complete: {stats.blocks_seen} diagrams "
        f"({stats.rendered} rendered, {stats.cache_hits} cached, "
        f"{stats.failures} failed, {stats.skipped} skipped), "
        f"{len(result.dependencies)} files read",
        file=sys.stderr,
    )
    return 1 if stats.failures else 0


async def _cmd_compose(args: argparse.Namespace) -> int:
    """Expand include directives without contacting Kroki."""
    from adockroki.compose.include_resolver import IncludeResolver
    from adockroki.pipeline.document_renderer import compose_document

    opened = _open_store(args)
    if opened is None:
        return 1
    store, rel = opened
    settings = args.settings

    resolver = IncludeResolver(
        store,
        max_depth=settings.include_max_depth,
        insert_markers=settings.include_markers,
        default_extension=settings.default_document_extension,
    )
    text, state = await compose_document(store, resolver, rel)

    _write_output(text, args.output)
    print(f"\nCompose complete: {len(state.dependencies)} files read", file=sys.stderr)
    return 0


async def _cmd_cache(args: argparse.Namespace) -> int:
    """Show or clear the persisted diagram cache."""
    from adockroki.cache.cache_factory import create_cache_store
    from adockroki.cache.render_cache import RenderCache

    settings = args.settings
    cache_store = create_cache_store(settings)
    cache = RenderCache(await cache_store.load())

    if args.action == "clear":
        removed = len(cache)
        cache.clear()
        await cache_store.save(cache.data)
        print(f"Cleared {removed} cached diagrams")
        return 0

    payload_bytes = sum(len(r.payload_base64) for r in cache.data.items.values())
    print(f"\nDiagram cache ({settings.cache_backend}):")
    if settings.cache_backend == "json":
        print(f"  Path:       {Path(settings.cache_path).expanduser()}")
    print(f"  Entries:    {len(cache)} / {settings.cache_max_items}")
    print(f"  Size:       {payload_bytes / 1024:.1f} KiB (base64)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
