"""Slide lifecycle: fetch, download, convert, display, wait, repeat.

One :class:`SlideController` drives the whole slideshow.  Every slide runs
through the phases of :class:`Phase` in order; the shared
:class:`~ttyslide.control.ControlState` is consulted at each phase boundary
so skip short-circuits to the next fetch and quit ends the run from
anywhere, including the middle of a network call or the interval wait.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Protocol, TypeVar

from ttyslide import display
from ttyslide.animation import Animator
from ttyslide.config import RANDOM_SOURCE, Config
from ttyslide.control import ControlState
from ttyslide.errors import OutputDirectoryError, RenderError
from ttyslide.input import InputListener
from ttyslide.keys import Key
from ttyslide.models import ImageDescriptor
from ttyslide.persistence import ensure_output_dir, save_image
from ttyslide.sizing import SizingDirective, compute_sizing, reserved_rows_for
from ttyslide.sources import SourceRegistry
from ttyslide.terminal import Terminal

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRY_DELAY_SECONDS = 5.0
ERROR_PAUSE_SECONDS = 3.0

FETCHING_MESSAGE = "Fetching…"
DOWNLOADING_MESSAGE = "Downloading…"
CONVERTING_MESSAGE = "Converting…"


class Phase(str, Enum):
    FETCHING = "fetching"
    DOWNLOADING = "downloading"
    CONVERTING = "converting"
    DISPLAYING = "displaying"
    WAITING = "waiting"
    ERROR_RECOVERY = "error-recovery"
    STOPPED = "stopped"


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------


class Downloader(Protocol):
    async def download(self, locator: str, timeout: float) -> bytes: ...


class Renderer(Protocol):
    async def render(
        self,
        data: bytes,
        sizing: SizingDirective,
        *,
        colors: bool,
        fill: bool,
    ) -> None: ...


Saver = Callable[[bytes, ImageDescriptor, str], Path | None]


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class SlideController:
    def __init__(
        self,
        config: Config,
        *,
        terminal: Terminal,
        control: ControlState,
        animator: Animator,
        registry: SourceRegistry,
        downloader: Downloader,
        renderer: Renderer,
        saver: Saver = save_image,
        listener: InputListener | None = None,
        retry_delay: float = RETRY_DELAY_SECONDS,
        error_pause: float = ERROR_PAUSE_SECONDS,
        on_phase: Callable[[Phase], None] | None = None,
    ) -> None:
        self._config = config
        self._terminal = terminal
        self._control = control
        self._animator = animator
        self._registry = registry
        self._downloader = downloader
        self._renderer = renderer
        self._saver = saver
        self._listener = listener
        self._retry_delay = retry_delay
        self._error_pause = error_pause
        self._on_phase = on_phase
        self._phase: Phase | None = None
        self._run_task: asyncio.Task[int] | None = None
        self._forced = False

    @property
    def phase(self) -> Phase | None:
        return self._phase

    # -- key bindings -------------------------------------------------------

    def bind_keys(self, listener: InputListener) -> None:
        """Register the slideshow commands on *listener*."""
        control = self._control
        listener.on(Key.space, control.toggle_pause)
        listener.on("n", control.request_skip)
        listener.on(Key.right, control.request_skip)
        listener.on("s", control.request_save)
        listener.on("q", control.request_quit)
        listener.on(Key.escape, control.request_quit)
        listener.on(Key.ctrl_c, self.force_quit)
        self._listener = listener

    def stop(self) -> None:
        """Request a normal quit; same path as the ``q`` key."""
        self._control.request_quit()

    def force_quit(self) -> None:
        """Quit without finishing anything, cancelling the run task."""
        self._forced = True
        self._control.request_quit()
        if self._run_task is not None and not self._run_task.done():
            self._run_task.cancel()

    # -- main loop ----------------------------------------------------------

    async def run(self) -> int:
        """Run until quit; returns the process exit code."""
        self._run_task = asyncio.current_task()  # type: ignore[assignment]
        config = self._config
        logger.info("Starting TTY Slide...")
        logger.info("Configuration: %s", _redacted(config))

        try:
            ensure_output_dir(config.output_dir)
        except OutputDirectoryError as exc:
            logger.error("%s", exc)
            await self._shutdown()
            return 1

        try:
            while self._control.running:
                try:
                    await self._until_quit(self._iteration())
                except Exception as exc:
                    logger.exception("Unexpected error in main loop")
                    await self._until_quit(
                        self._recover("Unexpected error", str(exc) or type(exc).__name__, self._retry_delay)
                    )
        except asyncio.CancelledError:
            if not self._forced:
                raise
            logger.info("Force quit requested")
        finally:
            await self._shutdown()

        logger.info("TTY Slide shut down complete")
        return 0

    async def _until_quit(self, coro: Awaitable[T]) -> T | None:
        """Await *coro*, abandoning it as soon as quit is requested."""
        task = asyncio.ensure_future(coro)
        quit_waiter = asyncio.ensure_future(self._control.wait_for_quit())
        try:
            await asyncio.wait({task, quit_waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            quit_waiter.cancel()
            if not task.done():
                task.cancel()
                await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    # -- one slide ----------------------------------------------------------

    async def _iteration(self) -> None:
        config = self._config
        control = self._control
        animator = self._animator

        # Fetching
        self._enter(Phase.FETCHING)
        control.reset_requests()
        animator.start_spinner(FETCHING_MESSAGE)

        source = self._registry.resolve(config.source)
        if source is None:
            logger.error("Unknown source: %s", config.source)
            await self._recover(
                "Unknown source",
                f"'{config.source}' is neither a known source nor a directory path.",
                self._retry_delay,
            )
            return
        if config.source == RANDOM_SOURCE:
            logger.info("Randomly selected source: %s", source.identifier())

        descriptor = await source.fetch(config)
        if self._abandoned():
            return
        if descriptor is None:
            logger.warning("Failed to fetch image, retrying in %gs...", self._retry_delay)
            await self._recover(
                "Could not fetch an image",
                f"{source.identifier()} did not return an image.",
                self._retry_delay,
            )
            return

        # Downloading
        self._enter(Phase.DOWNLOADING)
        animator.set_message(DOWNLOADING_MESSAGE)
        data = await self._downloader.download(descriptor.locator, config.timeout)
        if self._abandoned():
            return

        # Converting
        self._enter(Phase.CONVERTING)
        animator.set_message(CONVERTING_MESSAGE)
        animator.stop()
        self._terminal.clear_screen()
        sizing = compute_sizing(
            self._terminal.columns,
            self._terminal.rows,
            reserved_rows_for(config.caption),
        )
        try:
            await self._renderer.render(data, sizing, colors=config.colors, fill=config.fill)
        except RenderError as exc:
            logger.error("Render failed: %s", exc)
            await self._recover("Could not render image", str(exc), self._error_pause)
            return
        if self._abandoned(clear=True):
            return

        # Displaying
        self._enter(Phase.DISPLAYING)
        if config.caption:
            lines = display.caption_lines(descriptor, self._terminal.columns)
            self._terminal.write("\n".join(lines) + "\n")
        if not config.no_save:
            self._save(data, descriptor)

        # Waiting
        self._enter(Phase.WAITING)
        await animator.run_progress(config.interval_seconds)
        if not control.running:
            return
        if control.save_requested:
            self._save(data, descriptor, best_effort=True)
        if not control.paused:
            self._terminal.clear_screen()

    # -- helpers ------------------------------------------------------------

    def _enter(self, phase: Phase) -> None:
        self._phase = phase
        logger.debug("Phase: %s", phase.value)
        if self._on_phase is not None:
            self._on_phase(phase)

    def _abandoned(self, *, clear: bool = False) -> bool:
        """True when skip or quit arrived during the phase that just ended."""
        if not self._control.interrupted:
            return False
        logger.info("Slide abandoned (%s)", "quit" if not self._control.running else "skip")
        self._animator.stop()
        if clear:
            self._terminal.clear_screen()
        return True

    def _save(self, data: bytes, descriptor: ImageDescriptor, *, best_effort: bool = False) -> None:
        try:
            self._saver(data, descriptor, self._config.output_dir)
        except Exception as exc:
            if best_effort:
                logger.debug("Requested save failed: %s", exc)
            elif isinstance(exc, (OSError, ValueError)):
                logger.error("Failed to save image: %s", exc)
            else:
                raise

    async def _recover(self, title: str, message: str, delay: float) -> None:
        """Show a centered error panel, wait *delay* seconds, clear it."""
        self._enter(Phase.ERROR_RECOVERY)
        self._animator.stop()
        self._terminal.clear_screen()
        panel = display.error_panel(title, message, self._terminal.columns, self._terminal.rows)
        self._terminal.write("\n".join(panel))
        if await self._control.sleep(delay):
            self._terminal.clear_screen()

    async def _shutdown(self) -> None:
        self._animator.stop()
        if self._listener is not None:
            await self._listener.stop()
        self._terminal.clear_screen()
        self._terminal.show_cursor()
        self._enter(Phase.STOPPED)


def _redacted(config: Config) -> Config:
    if config.pexels_api_key:
        return dataclasses.replace(config, pexels_api_key="***")
    return config
