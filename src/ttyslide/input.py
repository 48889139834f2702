"""Keyboard listener that turns raw stdin bytes into handler calls.

The listener owns the terminal's raw input mode for its lifetime and runs
its read loop as a background task.  Handlers are zero-argument callables
registered per key; they only flip control flags and never draw.
"""

from __future__ import annotations

import asyncio
import logging
import termios
from types import TracebackType
from typing import Callable

from ttyslide.keys import KeyId, decode_key, split_keys
from ttyslide.terminal import Terminal

logger = logging.getLogger(__name__)

KeyHandler = Callable[[], None]


class InputListener:
    """Dispatch decoded keys from a :class:`Terminal` to registered handlers.

    Use as an async context manager so raw mode is always restored::

        async with InputListener(terminal) as listener:
            listener.on("q", control.request_quit)
            ...
    """

    def __init__(self, terminal: Terminal) -> None:
        self._terminal = terminal
        self._handlers: dict[KeyId, KeyHandler] = {}
        self._task: asyncio.Task[None] | None = None
        self._raw_enabled = False

    # -- registry -----------------------------------------------------------

    def on(self, key: KeyId, handler: KeyHandler) -> None:
        """Register *handler* for *key*, replacing any previous one."""
        self._handlers[key] = handler

    def off(self, key: KeyId) -> None:
        self._handlers.pop(key, None)

    def keys(self) -> list[KeyId]:
        return sorted(self._handlers)

    @property
    def active(self) -> bool:
        """True while the read loop is running."""
        return self._task is not None and not self._task.done()

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> bool:
        """Enable raw mode and start reading.

        Returns ``False`` (and stays inert) when raw mode is unavailable,
        e.g. when stdin is not a terminal.
        """
        if self.active:
            return True
        try:
            self._terminal.enable_raw_mode()
        except (termios.error, OSError, ValueError) as exc:
            logger.warning("Keyboard control unavailable: %s", exc)
            return False
        self._raw_enabled = True
        self._task = asyncio.create_task(self._read_loop(), name="input-listener")
        return True

    async def stop(self) -> None:
        """Stop reading and restore the previous terminal mode."""
        task, self._task = self._task, None
        try:
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        finally:
            if self._raw_enabled:
                self._raw_enabled = False
                self._terminal.restore_mode()

    async def __aenter__(self) -> InputListener:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    # -- dispatch -----------------------------------------------------------

    def feed(self, data: bytes) -> None:
        """Decode *data* and call the matching handlers in order."""
        for unit in split_keys(data):
            key = decode_key(unit)
            if key is None:
                continue
            handler = self._handlers.get(key)
            if handler is not None:
                handler()

    async def _read_loop(self) -> None:
        while True:
            try:
                data = await self._terminal.read()
            except Exception as exc:
                logger.warning("Keyboard input stopped: %s", exc)
                return
            if not data:
                logger.info("Keyboard input reached end of stream")
                return
            try:
                self.feed(data)
            except Exception:
                logger.exception("Key handler failed")
