"""Local directory source: shows random images from a folder."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from pathlib import Path

from ttyslide import style
from ttyslide.config import Config
from ttyslide.models import ImageDescriptor

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp")


class DirectorySource:
    def __init__(self, path: Path, *, rng: random.Random | None = None) -> None:
        self._path = path
        self._rng = rng or random.Random()

    @property
    def path(self) -> Path:
        return self._path

    def identifier(self) -> str:
        return f"Local Directory ({self._path})"

    def describe_tags(self) -> list[str]:
        return [
            f"{style.bold(style.bright_cyan('Local Directory Source:'))}",
            f"{style.green('•')} Source: {style.white(str(self._path))}",
            f"{style.green('•')} Supported formats: {style.white(', '.join(SUPPORTED_EXTENSIONS))}",
            f"{style.green('•')} Note: directory sources don't filter by tag",
        ]

    def list_images(self) -> list[Path]:
        """Files whose name mentions a supported image extension."""
        images: list[Path] = []
        for entry in sorted(self._path.iterdir()):
            if not entry.is_file():
                continue
            name = entry.name.lower()
            if any(ext in name for ext in SUPPORTED_EXTENSIONS):
                images.append(entry)
        return images

    async def fetch(self, config: Config) -> ImageDescriptor | None:
        if not self._path.is_dir():
            logger.error("Path is not a directory: %s", self._path)
            return None

        try:
            images = self.list_images()
        except OSError as exc:
            logger.error("Failed to read directory %s: %s", self._path, exc)
            return None

        if not images:
            logger.error("No supported image files found in directory: %s", self._path)
            return None

        chosen = self._rng.choice(images)
        try:
            info = chosen.stat()
        except OSError as exc:
            logger.error("Failed to stat %s: %s", chosen, exc)
            return None

        size_mb = info.st_size / 1024 / 1024
        modified = datetime.fromtimestamp(info.st_mtime).strftime("%Y-%m-%d")
        return ImageDescriptor(
            source="directory",
            locator=chosen.resolve().as_uri(),
            caption=f"📁 {chosen.name} | 💾 {size_mb:.2f} MB | 📅 {modified}",
            artist="Local File",
            description=f"Image from local directory: {chosen.parent}",
        )
