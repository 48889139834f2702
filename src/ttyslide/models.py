"""Core data types shared by sources, the controller and persistence."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ImageDescriptor:
    """One image to show.

    ``locator`` is either an ``http(s)://`` URL or a ``file://`` path.
    """

    source: str
    locator: str
    caption: str | None = None
    artist: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    nsfw: bool | None = None
