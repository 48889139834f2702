"""Saving slides to the output directory."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from urllib.parse import unquote, urlparse

from ttyslide.errors import OutputDirectoryError
from ttyslide.models import ImageDescriptor

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def ensure_output_dir(output_dir: str | Path) -> Path:
    path = Path(output_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(f"Failed to create output directory {path}: {exc}") from exc
    return path


def destination_for(descriptor: ImageDescriptor, output_dir: str | Path) -> Path:
    """``<output_dir>/<source>-<last path segment of the locator>``.

    Control characters decoded from the URL are dropped from the name.
    """
    name = Path(unquote(urlparse(descriptor.locator).path)).name
    name = _CONTROL_CHARS.sub("", name)
    if not name:
        name = f"slide-{int(time.time() * 1000)}.jpg"
    return Path(output_dir) / f"{descriptor.source}-{name}"


def save_image(data: bytes, descriptor: ImageDescriptor, output_dir: str | Path) -> Path | None:
    """Write *data* unless a file already exists at the destination.

    Returns the written path, or ``None`` when the file was already there.
    """
    path = destination_for(descriptor, output_dir)
    if path.exists():
        logger.debug("Image already exists: %s", path)
        return None
    path.write_bytes(data)
    logger.info("Saved image: %s", path)
    return path
