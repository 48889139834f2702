"""Virtual terminal for testing -- implements the Terminal protocol in-memory.

This module provides a ``VirtualTerminal`` class that satisfies the
``ttyslide.terminal.Terminal`` protocol without performing any real I/O.
All output is captured in a buffer for assertions, and keyboard input is
fed through an asyncio queue.
"""

from __future__ import annotations

import asyncio
import termios


class VirtualTerminal:
    """In-memory terminal that records all writes for test inspection.

    Parameters
    ----------
    rows:
        Number of terminal rows (height).
    columns:
        Number of terminal columns (width).
    raw_mode_error:
        When true, :meth:`enable_raw_mode` raises ``termios.error`` the way
        a real terminal does when stdin is a pipe.
    read_error:
        Exception raised by :meth:`read` instead of returning input.
    """

    def __init__(
        self,
        rows: int = 24,
        columns: int = 80,
        *,
        raw_mode_error: bool = False,
        read_error: Exception | None = None,
    ) -> None:
        self._rows = rows
        self._columns = columns
        self._buffer: list[str] = []
        self._input: asyncio.Queue[bytes] = asyncio.Queue()
        self._raw_mode_error = raw_mode_error
        self._read_error = read_error
        self.raw = False
        self.restore_count = 0
        self.clear_screen_count = 0
        self.cursor_visible = True

    # -- Terminal protocol: properties --------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @rows.setter
    def rows(self, value: int) -> None:
        self._rows = value

    @property
    def columns(self) -> int:
        return self._columns

    @columns.setter
    def columns(self, value: int) -> None:
        self._columns = value

    # -- Terminal protocol: raw mode ----------------------------------------

    def enable_raw_mode(self) -> None:
        if self._raw_mode_error:
            raise termios.error(25, "Inappropriate ioctl for device")
        self.raw = True

    def restore_mode(self) -> None:
        self.raw = False
        self.restore_count += 1

    # -- Terminal protocol: input -------------------------------------------

    async def read(self) -> bytes:
        if self._read_error is not None:
            raise self._read_error
        return await self._input.get()

    # -- Terminal protocol: output ------------------------------------------

    def write(self, data: str) -> None:
        """Append *data* to the internal buffer."""
        self._buffer.append(data)

    def hide_cursor(self) -> None:
        self.cursor_visible = False
        self.write("\x1b[?25l")

    def show_cursor(self) -> None:
        self.cursor_visible = True
        self.write("\x1b[?25h")

    def clear_line(self) -> None:
        self.write("\x1b[2K\r")

    def clear_screen(self) -> None:
        self.clear_screen_count += 1
        self.write("\x1b[2J\x1b[H")

    # -- Test helpers -------------------------------------------------------

    @property
    def output(self) -> str:
        """Return everything written to the terminal as a single string."""
        return "".join(self._buffer)

    @property
    def write_count(self) -> int:
        return len(self._buffer)

    def clear_buffer(self) -> None:
        """Discard all recorded output."""
        self._buffer.clear()

    def simulate_input(self, data: bytes) -> None:
        """Queue *data* as if the user had typed it."""
        self._input.put_nowait(data)

    def simulate_eof(self) -> None:
        self._input.put_nowait(b"")
