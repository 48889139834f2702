"""Image source protocol and shared HTTP helpers."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol

import httpx

from ttyslide.config import Config
from ttyslide.models import ImageDescriptor


class ImageSource(Protocol):
    """Something that can pick the next image to show.

    ``fetch`` returns ``None`` for ordinary failures instead of raising.
    """

    async def fetch(self, config: Config) -> ImageDescriptor | None: ...

    def describe_tags(self) -> list[str]: ...

    def identifier(self) -> str: ...


@asynccontextmanager
async def http_client(
    client: httpx.AsyncClient | None, timeout: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *client* if given, otherwise a short-lived client."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True) as owned:
        yield owned
