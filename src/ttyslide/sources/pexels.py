"""Pexels photo search source (requires ``PEXELS_API_KEY``)."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

import httpx
from pydantic import BaseModel

from ttyslide import style
from ttyslide.config import Config
from ttyslide.errors import SourceError
from ttyslide.models import ImageDescriptor
from ttyslide.retry import resilient_fetch
from ttyslide.sources.base import http_client

logger = logging.getLogger(__name__)

API_URL = "https://api.pexels.com/v1/search"
PER_PAGE = 20
MAX_RANDOM_PAGE = 10

TAGS = (
    "nature", "landscape", "city", "ocean", "forest", "mountains", "sunset", "sunrise",
    "architecture", "building", "street", "travel", "sky", "clouds", "flowers", "animals",
    "portrait", "people", "food", "coffee", "technology", "abstract", "vintage", "modern",
    "minimal", "colorful", "black and white", "urban", "rural", "beach", "snow", "autumn",
    "spring", "summer", "winter", "light", "shadow", "texture", "pattern", "geometric",
    "artistic", "creative", "inspiration", "peaceful", "energy", "motion", "still life",
)


# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------


class PexelsPhotoSource(BaseModel):
    original: str
    large: str


class PexelsPhoto(BaseModel):
    id: int
    photographer: str
    alt: str | None = None
    src: PexelsPhotoSource


class PexelsResponse(BaseModel):
    photos: list[PexelsPhoto] = []


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------


class PexelsSource:
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
        return "pexels"

    def describe_tags(self) -> list[str]:
        lines = [
            f"{style.bold(style.bright_cyan('Pexels API Tags:'))}",
            "",
            f"{style.bold(style.green('Available Tags:'))} {style.white('(all content is safe for work)')}",
        ]
        per_group = 6
        for start in range(0, len(TAGS), per_group):
            lines.extend(f"  {style.green('•')} {style.white(tag)}" for tag in TAGS[start : start + per_group])
            if start + per_group < len(TAGS):
                lines.append("")
        return lines

    def pick_query(self, config: Config) -> str:
        if config.custom_tags:
            return " ".join(config.custom_tags)
        return self._rng.choice(TAGS)

    async def fetch(self, config: Config) -> ImageDescriptor | None:
        if not config.pexels_api_key:
            logger.error("Pexels API key not found; set PEXELS_API_KEY in .env or the environment")
            return None

        query = self.pick_query(config)
        logger.info('Using Pexels search query: "%s"', query)
        return await resilient_fetch(
            lambda: self._request(query, config.pexels_api_key or "", config.timeout),
            max_retries=config.max_retries,
            timeout=config.timeout,
            label="pexels request",
            sleep=self._sleep,
        )

    async def _request(self, query: str, api_key: str, timeout: float) -> ImageDescriptor:
        params = {
            "query": query,
            "per_page": str(PER_PAGE),
            "page": str(self._rng.randint(1, MAX_RANDOM_PAGE)),
        }
        async with http_client(self._client, timeout) as client:
            response = await client.get(API_URL, params=params, headers={"Authorization": api_key})

        if response.status_code >= 400:
            raise SourceError(f"API request failed with status: {response.status_code}")

        data = PexelsResponse.model_validate(response.json())
        if not data.photos:
            raise SourceError("No photos found in API response")

        photo = self._rng.choice(data.photos)
        logger.info("Fetched Pexels image: %s", photo.src.large)
        return ImageDescriptor(
            source="pexels",
            locator=photo.src.large,
            artist=photo.photographer,
            caption=f"Photo by {photo.photographer} on Pexels",
            description=photo.alt or query,
        )
