"""Loading spinner and interval progress bar drawn on a single terminal line.

Both animations are driven by one timer task owned by :class:`Animator`.
Only one animation can be active at a time; starting another while one is
running is a no-op.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from ttyslide import display
from ttyslide.control import ControlState
from ttyslide.terminal import Terminal

logger = logging.getLogger(__name__)

SPINNER_INTERVAL = 0.08
PROGRESS_INTERVAL = 0.1
PROGRESS_TICK_MS = 100


class AnimationMode(str, Enum):
    SPINNER = "spinner"
    PROGRESS = "progress"


@dataclass
class AnimationState:
    active: bool = False
    mode: AnimationMode | None = None
    frame: int = 0
    message: str = ""
    total_updates: int = 0


class Animator:
    """Cooperative frame producer for the spinner and the progress bar.

    The timer task sleeps for the mode's interval and calls :meth:`tick`
    until it reports that the animation is finished.  ``spinner_interval``
    and ``progress_interval`` only change the wall-clock pace; the progress
    bar always counts ``duration_ms / 100`` updates.
    """

    _frames = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

    def __init__(
        self,
        terminal: Terminal,
        control: ControlState,
        *,
        spinner_interval: float = SPINNER_INTERVAL,
        progress_interval: float = PROGRESS_INTERVAL,
    ) -> None:
        self._terminal = terminal
        self._control = control
        self._spinner_interval = spinner_interval
        self._progress_interval = progress_interval
        self._state = AnimationState()
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> AnimationState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state.active

    # -- start / tick / stop ------------------------------------------------

    def start(
        self,
        mode: AnimationMode,
        *,
        message: str = "",
        duration: float = 0.0,
    ) -> bool:
        """Begin *mode*; returns ``False`` if an animation is already running."""
        if self._state.active:
            return False

        total = int(duration * 1000) // PROGRESS_TICK_MS if mode is AnimationMode.PROGRESS else 0
        self._state = AnimationState(
            active=True,
            mode=mode,
            frame=0,
            message=message,
            total_updates=total,
        )
        self._terminal.hide_cursor()
        self._draw()
        self._task = asyncio.create_task(self._run(), name=f"animation-{mode.value}")
        return True

    def tick(self) -> bool:
        """Advance one frame and redraw.

        Returns ``False`` once the animation has nothing more to show: the
        progress bar is full, or skip/quit was requested.
        """
        state = self._state
        if not state.active:
            return False

        if state.mode is AnimationMode.SPINNER:
            state.frame = (state.frame + 1) % len(self._frames)
            self._draw()
            return True

        if self._control.interrupted:
            return False
        if not self._control.paused:
            state.frame = min(state.frame + 1, state.total_updates)
        self._draw()
        return state.frame < state.total_updates

    def stop(self) -> None:
        """Cancel the timer, clear the line and show the cursor again."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        if not self._state.active:
            return
        self._state.active = False
        self._terminal.clear_line()
        self._terminal.show_cursor()

    # -- conveniences -------------------------------------------------------

    def start_spinner(self, message: str) -> bool:
        return self.start(AnimationMode.SPINNER, message=message)

    def set_message(self, message: str) -> None:
        self._state.message = message
        if self._state.active:
            self._draw()

    async def run_progress(self, seconds: float) -> bool:
        """Show the progress bar for *seconds* and wait for it to end.

        Returns ``True`` when the bar filled up, ``False`` when it was cut
        short by skip, quit or :meth:`stop`.
        """
        if not self.start(AnimationMode.PROGRESS, duration=seconds):
            return False
        task = self._task
        try:
            if task is not None:
                await asyncio.wait({task})
            return self._state.frame >= self._state.total_updates and not self._control.interrupted
        finally:
            self.stop()

    # -- internals ----------------------------------------------------------

    async def _run(self) -> None:
        interval = (
            self._spinner_interval
            if self._state.mode is AnimationMode.SPINNER
            else self._progress_interval
        )
        while True:
            await asyncio.sleep(interval)
            if not self.tick():
                return

    def _draw(self) -> None:
        state = self._state
        columns = self._terminal.columns
        if state.mode is AnimationMode.SPINNER:
            line = display.spinner_line(self._frames[state.frame], state.message, columns)
        else:
            line = display.progress_line(
                state.frame, state.total_updates, columns, paused=self._control.paused
            )
        self._terminal.clear_line()
        self._terminal.write(line)
