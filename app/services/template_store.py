import asyncio
import logging
from pathlib import Path

import httpx

from app.exceptions.custom import TemplateLoadError

logger = logging.getLogger(__name__)

_TIMEOUT = 10.0


class TemplateStore:
    """Caches the template body after its first successful load.

    Concurrent callers during a load share the same underlying fetch. The
    cache is written only once the whole body is available and is cleared
    only through ``invalidate``.
    """

    def __init__(self, client: httpx.AsyncClient, source: str, timeout: float = _TIMEOUT):
        self._client = client
        self._source = source
        self._timeout = timeout
        self._html: str | None = None
        self._inflight: asyncio.Task[str] | None = None
        self._generation = 0

    @property
    def source(self) -> str:
        return self._source

    @property
    def is_cached(self) -> bool:
        return self._html is not None

    async def load(self) -> str:
        if self._html is not None:
            return self._html
        if self._inflight is None:
            self._inflight = asyncio.create_task(self._fetch())
        # A cancelled caller must not cancel the fetch the others wait on
        return await asyncio.shield(self._inflight)

    def invalidate(self) -> None:
        # A fetch started before this call must not refill the cache
        self._generation += 1
        self._inflight = None
        self._html = None
        logger.info("Template cache cleared for %s", self._source)

    async def _fetch(self) -> str:
        generation = self._generation
        try:
            if self._source.startswith(("http://", "https://")):
                html = await self._fetch_remote()
            else:
                html = await self._read_file()
            if generation != self._generation:
                logger.info("Discarding template loaded before invalidation")
                return html
            self._html = html
            logger.info("Template loaded from %s (%d bytes)", self._source, len(html))
            return html
        finally:
            if generation == self._generation:
                self._inflight = None

    async def _fetch_remote(self) -> str:
        try:
            resp = await self._client.get(
                self._source, follow_redirects=True, timeout=self._timeout
            )
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.TimeoutException) as exc:
            logger.error("Template fetch failed for %s: %s", self._source, exc)
            raise TemplateLoadError(self._source, reason=str(exc)) from exc
        return resp.text

    async def _read_file(self) -> str:
        try:
            return await asyncio.to_thread(Path(self._source).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Template read failed for %s: %s", self._source, exc)
            raise TemplateLoadError(self._source, reason=str(exc)) from exc
