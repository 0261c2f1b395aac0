# src/pipeline/scheduler.py — v1
"""Debounced re-render scheduling driven by document-store change events.

Each run gets a generation number from a monotonically increasing counter.
A run whose generation is no longer the latest when it finishes is
discarded, so only the newest result is ever delivered.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from adockroki.core.models import FileChangeEvent, RenderResult

logger = logging.getLogger(__name__)

RenderFn = Callable[[int], Awaitable[RenderResult]]
ResultCallback = Callable[[RenderResult], None]
ErrorCallback = Callable[[Exception], None]

DEFAULT_DEBOUNCE_MS = 120


class RenderScheduler:
    """Coalesces render requests and drops superseded results.

    Usage:
        scheduler = RenderScheduler(lambda gen: renderer.render(path, gen), show)
        scheduler.request_render()
        scheduler.on_file_event(FileChangeEvent(kind="modified", path="a.puml"))
    """

    def __init__(
        self,
        render: RenderFn,
        on_result: ResultCallback,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._render = render
        self._on_result = on_result
        self._on_error = on_error
        self._debounce = max(debounce_ms, 0) / 1000
        self._generation = 0
        self._dependencies: set[str] = set()
        self._pending: asyncio.Task[None] | None = None
        self._running: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def dependencies(self) -> set[str]:
        """Dependency set of the last delivered result."""
        return set(self._dependencies)

    def request_render(self) -> None:
        """Schedule a render after the debounce delay, replacing any pending one."""
        if self._closed:
            return
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._debounced())

    def on_file_event(self, event: FileChangeEvent) -> bool:
        """Request a render if the event touches a dependency of the last run.

        Returns:
            True if a render was requested.
        """
        touched = event.touched_paths & self._dependencies
        if not touched:
            return False
        logger.debug("%s event on %s triggers re-render", event.kind, sorted(touched))
        self.request_render()
        return True

    async def run_now(self) -> RenderResult | None:
        """Render immediately; returns None when the result was superseded."""
        self._generation += 1
        generation = self._generation
        try:
            result = await self._render(generation)
        except Exception as e:
            if generation != self._generation:
                return None
            if self._on_error is None:
                raise
            logger.error("Render generation %d failed: %s", generation, e)
            self._on_error(e)
            return None

        if generation != self._generation:
            logger.debug(
                "Discarding stale render %d (latest %d)", generation, self._generation
            )
            return None

        self._dependencies = set(result.dependencies)
        self._on_result(result)
        return result

    async def wait_idle(self) -> None:
        """Wait until no debounce timer or render is outstanding."""
        while True:
            tasks = set(self._running)
            if self._pending is not None and not self._pending.done():
                tasks.add(self._pending)
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def close(self) -> None:
        self._closed = True
        tasks = set(self._running)
        if self._pending is not None:
            tasks.add(self._pending)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _debounced(self) -> None:
        await asyncio.sleep(self._debounce)
        task = asyncio.current_task()
        if task is not None:
            self._running.add(task)
            self._pending = None
        try:
            await self.run_now()
        except Exception:
            logger.exception("Scheduled render failed")
        finally:
            if task is not None:
                self._running.discard(task)
