# src/kroki/client.py — v1
"""Async Kroki HTTP client.

POST {base_url}/{kind}/{format} with the diagram source as a UTF-8
text/plain body. Any non-2xx status, timeout or connection failure is
raised as KrokiRenderError; callers never see raw httpx exceptions.
Scheme policy (HTTP vs HTTPS) is enforced by Settings, not here.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

ERROR_PREVIEW_CHARS = 400


class KrokiRenderError(RuntimeError):
    """Transport-level render failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class KrokiClient:
    """Thin wrapper around httpx.AsyncClient for the Kroki render endpoint.

    Usage:
        async with KrokiClient("https://kroki.io", timeout=15.0) as client:
            svg = await client.render("plantuml", "svg", "A -> B")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = 15.0,
        user_agent: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout, transport=transport
        )
        self.request_count = 0

    @property
    def base_url(self) -> str:
        return self._base_url

    def endpoint(self, diagram_kind: str, output_format: str) -> str:
        return (
            f"{self._base_url}/{quote(diagram_kind, safe='')}"
            f"/{quote(output_format, safe='')}"
        )

    async def render(self, diagram_kind: str, output_format: str, source: str) -> bytes:
        """Render source and return the raw image bytes.

        Raises:
            KrokiRenderError: Non-2xx status, timeout, network error or empty body.
        """
        url = self.endpoint(diagram_kind, output_format)
        headers = {"Content-Type": "text/plain; charset=utf-8"}
        if self._user_agent:
            headers["User-Agent"] = self._user_agent

        self.request_count += 1
        logger.debug("POST %s (%d chars)", url, len(source))
        try:
            resp = await self._http.post(
                url,
                content=source.encode("utf-8"),
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise KrokiRenderError(
                f"Kroki request timeout: {self._timeout_ms()}ms"
            ) from e
        except httpx.HTTPError as e:
            raise KrokiRenderError(f"Kroki request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            preview = resp.text[:ERROR_PREVIEW_CHARS] if resp.content else ""
            raise KrokiRenderError(
                f"Kroki render failed: {resp.status_code}\n{preview}",
                status_code=resp.status_code,
            )

        if not resp.content:
            raise KrokiRenderError("Kroki response has no body", resp.status_code)

        return resp.content

    def _timeout_ms(self) -> int:
        return int((self._timeout or 0) * 1000)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> KrokiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
