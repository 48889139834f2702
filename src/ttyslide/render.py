"""ASCII-art rendering through the external ``jp2a`` converter."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile

from ttyslide.errors import RenderError
from ttyslide.sizing import SizingDirective
from ttyslide.terminal import Terminal

logger = logging.getLogger(__name__)

JP2A = "jp2a"

INSTALL_HINTS = (
    "  macOS: brew install jp2a",
    "  Ubuntu/Debian: sudo apt-get install jp2a",
    "  Arch: sudo pacman -S jp2a",
    "  Fedora: sudo dnf install jp2a",
)


def jp2a_available(executable: str = JP2A) -> bool:
    return shutil.which(executable) is not None


def build_arguments(
    path: str,
    sizing: SizingDirective,
    *,
    colors: bool,
    fill: bool,
) -> list[str]:
    args = [f"--{sizing.mode}={sizing.value}"]
    if colors:
        args.append("--colors")
    if fill:
        args.append("--fill")
    args.append(path)
    return args


class Jp2aRenderer:
    """Runs ``jp2a`` on a temporary copy of the image and writes its output.

    The art is captured and written through the :class:`Terminal` so it goes
    to the same stream as the spinner and the progress bar.
    """

    def __init__(self, terminal: Terminal, executable: str = JP2A) -> None:
        self._terminal = terminal
        self._executable = executable

    async def render(
        self,
        data: bytes,
        sizing: SizingDirective,
        *,
        colors: bool,
        fill: bool,
    ) -> None:
        fd, path = tempfile.mkstemp(prefix="slide-", suffix=".jpg")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)

            args = build_arguments(path, sizing, colors=colors, fill=fill)
            logger.debug("jp2a command: %s %s", self._executable, " ".join(args))

            try:
                proc = await asyncio.create_subprocess_exec(
                    self._executable,
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                raise RenderError(f"Could not start {self._executable}: {exc}") from exc

            try:
                stdout, stderr = await proc.communicate()
            except asyncio.CancelledError:
                if proc.returncode is None:
                    proc.kill()
                    await proc.wait()
                raise
            if proc.returncode != 0:
                message = stderr.decode("utf-8", errors="replace").strip()
                raise RenderError(f"jp2a failed: {message or f'exit code {proc.returncode}'}")

            self._terminal.write(stdout.decode("utf-8", errors="replace"))
        finally:
            try:
                os.remove(path)
            except OSError:
                pass
