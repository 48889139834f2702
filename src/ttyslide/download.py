"""Retrieve image bytes for a descriptor's locator."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from ttyslide.errors import DownloadError
from ttyslide.sources.base import http_client

logger = logging.getLogger(__name__)


def locator_path(locator: str) -> Path:
    """Filesystem path of a ``file://`` locator."""
    return Path(unquote(urlparse(locator).path))


class Downloader:
    """Reads ``file://`` locators from disk and fetches everything else over HTTP."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def download(self, locator: str, timeout: float) -> bytes:
        if locator.startswith("file://"):
            return await self._read_local(locator)
        return await self._fetch_remote(locator, timeout)

    async def _read_local(self, locator: str) -> bytes:
        path = locator_path(locator)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise DownloadError(f"Failed to read local file {path}: {exc}", kind="local") from exc
        logger.info("Read local file: %.2fMB", len(data) / 1024 / 1024)
        return data

    async def _fetch_remote(self, url: str, timeout: float) -> bytes:
        try:
            async with http_client(self._client, timeout) as client:
                response = await client.get(url, timeout=timeout)
        except httpx.HTTPError as exc:
            raise DownloadError(f"Failed to download image: {exc}", kind="remote") from exc

        if response.status_code >= 400:
            raise DownloadError(f"Failed to download image: {response.status_code}", kind="remote")

        data = response.content
        logger.info("Downloaded image: %.2fMB", len(data) / 1024 / 1024)
        return data
