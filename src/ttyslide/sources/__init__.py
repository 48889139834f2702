"""Image sources and the registry that resolves ``--source`` values."""

from __future__ import annotations

import random
from typing import Mapping

from ttyslide import style
from ttyslide.config import RANDOM_SOURCE, Directory, Predefined, classify_source
from ttyslide.sources.base import ImageSource, http_client
from ttyslide.sources.directory import DirectorySource
from ttyslide.sources.pexels import PexelsSource
from ttyslide.sources.waifu import WaifuSource


class SourceRegistry:
    """Predefined sources by name, plus on-demand directory sources."""

    def __init__(
        self,
        sources: Mapping[str, ImageSource] | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        if sources is None:
            sources = {"waifu": WaifuSource(), "pexels": PexelsSource()}
        self._sources: dict[str, ImageSource] = dict(sources)
        self._rng = rng or random.Random()

    def names(self) -> list[str]:
        return list(self._sources)

    def get(self, name: str) -> ImageSource | None:
        return self._sources.get(name)

    def random_source(self) -> ImageSource | None:
        if not self._sources:
            return None
        return self._sources[self._rng.choice(self.names())]

    def resolve(self, source: str) -> ImageSource | None:
        """Return the source for a ``--source`` value, or ``None`` if unknown.

        ``random`` picks uniformly among the predefined sources on every call.
        """
        spec = classify_source(source)
        if isinstance(spec, Directory):
            return DirectorySource(spec.path)
        if isinstance(spec, Predefined):
            if spec.name == RANDOM_SOURCE:
                return self.random_source()
            return self.get(spec.name)
        return self._sources.get(source)

    def describe_sources(self) -> list[str]:
        lines = [style.bold(style.bright_cyan("Available Sources:")), ""]
        for name, source in self._sources.items():
            lines.append(f"{style.green('•')} {style.bold(style.white(name))} - {source.identifier()} API")
        lines.append(f"{style.green('•')} {style.bold(style.white(RANDOM_SOURCE))} - Randomly select from all sources")
        lines.append(
            f"{style.green('•')} {style.bold(style.white('/path/to/dir'))} - Use local directory (sets --no-save)"
        )
        return lines

    def describe_tags(self) -> list[str]:
        lines: list[str] = []
        for source in self._sources.values():
            lines.extend(source.describe_tags())
            lines.append("")
        return lines


__all__ = [
    "DirectorySource",
    "ImageSource",
    "PexelsSource",
    "SourceRegistry",
    "WaifuSource",
    "http_client",
]
