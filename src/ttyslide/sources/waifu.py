"""waifu.im search API source."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

import httpx
from pydantic import BaseModel

from ttyslide import style
from ttyslide.config import NSFW_TAGS, Config
from ttyslide.errors import SourceError
from ttyslide.models import ImageDescriptor
from ttyslide.retry import resilient_fetch
from ttyslide.sources.base import http_client

logger = logging.getLogger(__name__)

API_URL = "https://api.waifu.im/search"
MIN_HEIGHT_FILTER = ">=2000"

VERSATILE_TAGS = (
    "maid",
    "waifu",
    "marin-kitagawa",
    "mori-calliope",
    "raiden-shogun",
    "oppai",
    "selfies",
    "uniform",
    "kamisato-ayaka",
)


# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------


class WaifuArtist(BaseModel):
    name: str


class WaifuTag(BaseModel):
    name: str
    description: str | None = None
    is_nsfw: bool = False


class WaifuImage(BaseModel):
    url: str
    is_nsfw: bool = False
    artist: WaifuArtist | None = None
    tags: list[WaifuTag] = []


class WaifuResponse(BaseModel):
    images: list[WaifuImage] = []


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------


class WaifuSource:
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._rng = rng or random.Random()
        self._sleep = sleep

    def identifier(self) -> str:
        return "waifu"

    def describe_tags(self) -> list[str]:
        lines = [
            f"{style.bold(style.bright_cyan('Waifu API Tags:'))}",
            "",
            f"{style.bold(style.green('Safe Tags:'))} {style.white('(suitable for all audiences)')}",
        ]
        lines.extend(f"  {style.green('•')} {style.white(tag)}" for tag in VERSATILE_TAGS)
        lines.append("")
        lines.append(
            f"{style.bold(style.bright_red('NSFW/Explicit Tags:'))} {style.yellow('(18+ content only)')}"
        )
        lines.extend(
            f"  {style.bright_red('•')} {style.white(tag)} {style.bright_red('[EXPLICIT]')}"
            for tag in NSFW_TAGS
        )
        return lines

    def pick_tags(self, config: Config) -> list[str]:
        if config.custom_tags:
            return list(config.custom_tags)
        pool = VERSATILE_TAGS + NSFW_TAGS if config.include_nsfw else VERSATILE_TAGS
        return [self._rng.choice(pool)]

    async def fetch(self, config: Config) -> ImageDescriptor | None:
        tags = self.pick_tags(config)
        logger.info("Fetching waifu with tags: %s", ", ".join(tags))
        return await resilient_fetch(
            lambda: self._request(tags, config.timeout),
            max_retries=config.max_retries,
            timeout=config.timeout,
            label="waifu request",
            sleep=self._sleep,
        )

    async def _request(self, tags: list[str], timeout: float) -> ImageDescriptor:
        params = [("included_tags", tag) for tag in tags]
        params.append(("height", MIN_HEIGHT_FILTER))

        async with http_client(self._client, timeout) as client:
            response = await client.get(API_URL, params=params)

        if response.status_code >= 400:
            raise SourceError(f"API request failed with status: {response.status_code}")

        data = WaifuResponse.model_validate(response.json())
        if not data.images or not data.images[0].url:
            raise SourceError("No image found in API response")

        image = data.images[0]
        logger.info("Fetched waifu image: %s", image.url)
        descriptions = [tag.description for tag in image.tags if tag.description]
        return ImageDescriptor(
            source="waifu",
            locator=image.url,
            artist=image.artist.name if image.artist else "Unknown",
            caption=f"Artist: {image.artist.name}" if image.artist else None,
            description=" • ".join(descriptions) or None,
            tags=tuple(tag.name for tag in image.tags),
            nsfw=image.is_nsfw,
        )
