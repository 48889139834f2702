"""Terminal access for the slideshow: raw keyboard input and screen output.

``ProcessTerminal`` puts stdin into byte-at-a-time, no-echo input and draws
with plain ANSI escape sequences. Tests substitute an in-memory double.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import termios
from typing import Protocol

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_LINE = "\x1b[2K\r"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"

DEFAULT_COLUMNS = 80
DEFAULT_ROWS = 24

_READ_SIZE = 1024


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """What the slideshow needs from a terminal."""

    def enable_raw_mode(self) -> None: ...

    def restore_mode(self) -> None: ...

    async def read(self) -> bytes: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_line(self) -> None: ...

    def clear_screen(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """The controlling terminal, read from ``sys.stdin`` and drawn on ``sys.stdout``.

    Raw mode here only touches the input side: canonical mode, echo, signal
    generation and flow control are switched off so every keystroke
    (including Ctrl+C) arrives as bytes, while output post-processing stays
    on so newlines written by the renderer still return the carriage.
    """

    def __init__(self) -> None:
        self._original_termios: list | None = None

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return DEFAULT_COLUMNS

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return DEFAULT_ROWS

    @property
    def raw(self) -> bool:
        return self._original_termios is not None

    # -- raw mode -----------------------------------------------------------

    def enable_raw_mode(self) -> None:
        """Switch stdin to raw input, remembering the previous attributes.

        Raises ``termios.error`` (or ``OSError``/``ValueError``) when stdin is
        not a terminal; callers treat that as "no keyboard control".
        """
        if self._original_termios is not None:
            return
        fd = sys.stdin.fileno()
        original = termios.tcgetattr(fd)
        termios.tcsetattr(fd, termios.TCSANOW, _raw_input_attrs(original))
        self._original_termios = original

    def restore_mode(self) -> None:
        """Restore the terminal attributes saved by :meth:`enable_raw_mode`."""
        if self._original_termios is None:
            return
        try:
            termios.tcsetattr(
                sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios
            )
        except (termios.error, OSError, ValueError) as exc:
            logger.warning("Failed to restore terminal mode: %s", exc)
        self._original_termios = None

    # -- input --------------------------------------------------------------

    async def read(self) -> bytes:
        """Wait until stdin is readable and return the available bytes.

        Returns ``b""`` at end of input.
        """
        loop = asyncio.get_running_loop()
        fd = sys.stdin.fileno()
        future: asyncio.Future[bytes] = loop.create_future()

        def _on_readable() -> None:
            loop.remove_reader(fd)
            if future.done():
                return
            try:
                future.set_result(os.read(fd, _READ_SIZE))
            except OSError as exc:
                future.set_exception(exc)

        loop.add_reader(fd, _on_readable)
        try:
            return await future
        finally:
            loop.remove_reader(fd)

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        self._raw_write(data)

    def hide_cursor(self) -> None:
        self._raw_write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._raw_write(_SHOW_CURSOR)

    def clear_line(self) -> None:
        self._raw_write(_CLEAR_LINE)

    def clear_screen(self) -> None:
        self._raw_write(_CLEAR_SCREEN)

    # -- private: raw write ------------------------------------------------

    def _raw_write(self, data: str) -> None:
        """Write directly to stdout, bypassing buffering."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _raw_input_attrs(attrs: list) -> list:
    """Return a copy of *attrs* with byte-at-a-time, no-echo input."""
    raw = list(attrs)
    raw[0] &= ~(termios.ICRNL | termios.IXON | termios.INPCK | termios.ISTRIP)
    raw[3] &= ~(termios.ECHO | termios.ICANON | termios.ISIG | termios.IEXTEN)
    cc = list(raw[6])
    cc[termios.VMIN] = 1
    cc[termios.VTIME] = 0
    raw[6] = cc
    return raw
