"""Exception types raised by slideshow collaborators."""

from __future__ import annotations

from typing import Literal


class SlideError(Exception):
    """Base class for slideshow errors."""


class SourceError(SlideError):
    """An image source could not produce a descriptor."""


class DownloadError(SlideError):
    """Image bytes could not be retrieved.

    ``kind`` tells whether the failure was reading a local file or talking to
    a remote server.
    """

    def __init__(self, message: str, kind: Literal["local", "remote"]) -> None:
        super().__init__(message)
        self.kind = kind


class RenderError(SlideError):
    """The external converter rejected or failed on the image."""


class OutputDirectoryError(SlideError):
    """The directory for saved slides could not be created."""
