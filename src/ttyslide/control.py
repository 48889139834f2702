"""Shared control flags written by key handlers and read by the slideshow."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field


@dataclass
class ControlState:
    """Pending user commands for the running slideshow.

    One instance is created at startup and handed to both the input key
    handlers and the controller.  The handlers run to completion without
    suspending, so plain attribute reads and writes need no locking.
    """

    running: bool = True
    paused: bool = False
    skip_requested: bool = False
    save_requested: bool = False
    _quit_event: asyncio.Event = field(
        default_factory=asyncio.Event, repr=False, compare=False
    )

    def reset_requests(self) -> None:
        """Clear the per-slide requests at the start of an iteration."""
        self.skip_requested = False
        self.save_requested = False

    def toggle_pause(self) -> None:
        self.paused = not self.paused

    def request_skip(self) -> None:
        self.skip_requested = True

    def request_save(self) -> None:
        self.save_requested = True

    def request_quit(self) -> None:
        self.running = False
        self._quit_event.set()

    @property
    def interrupted(self) -> bool:
        """True when the current slide should be abandoned."""
        return not self.running or self.skip_requested

    async def wait_for_quit(self) -> None:
        await self._quit_event.wait()

    async def sleep(self, seconds: float) -> bool:
        """Sleep for *seconds* unless quit arrives first.

        Returns ``True`` when the full delay elapsed.
        """
        if not self.running:
            return False
        try:
            await asyncio.wait_for(self._quit_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return True
        return False
