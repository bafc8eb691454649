"""
Sekai Sync - Asset Downloader

Thin async wrapper over one shared httpx client. Never raises for transport
problems or malformed URLs: both are reported as status 0 so the caller can
move on to the next candidate URL.
"""

from __future__ import annotations

from typing import Any, NamedTuple

import httpx
import structlog

from sekai_sync.config import settings

logger = structlog.get_logger(__name__)


class DownloadResult(NamedTuple):
    url: str
    status_code: int
    content: bytes
    error: str | None = None

    @property
    def ok(self) -> bool:
        """2xx status with a non-empty body."""
        return self.error is None and 200 <= self.status_code < 300 and len(self.content) > 0


class AssetDownloader:
    """
    Usage:
        async with AssetDownloader() as dl:
            result = await dl.get(url)
    """

    def __init__(self, timeout: float | None = None, user_agent: str | None = None):
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._user_agent = user_agent or settings.USER_AGENT
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> AssetDownloader:
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self._user_agent},
            timeout=self._timeout,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def get(self, url: str) -> DownloadResult:
        assert self._client is not None, "Client not initialized. Use 'async with'."

        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("asset_request_error", url=url, error=str(e), error_type=type(e).__name__)
            return DownloadResult(url=url, status_code=0, content=b"", error=str(e))

        return DownloadResult(url=url, status_code=response.status_code, content=response.content)
