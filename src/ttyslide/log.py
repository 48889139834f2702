"""Logging setup.

Log output would tear through the slideshow, so nothing is emitted unless
``DEBUG=true`` (colored lines on stderr) or ``TTY_SLIDE_LOG`` names a file.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping

_RESET = "\033[0m"
_BOLD = "\033[1m"
_BRIGHT_CYAN = "\033[96m"

_LEVEL_STYLES = {
    logging.DEBUG: "\033[105m",  # bright magenta background
    logging.INFO: "\033[106m",  # bright cyan background
    logging.WARNING: "\033[103m",  # bright yellow background
    logging.ERROR: "\033[101m",  # bright red background
    logging.CRITICAL: "\033[41m",
}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColorFormatter(logging.Formatter):
    """``[timestamp]  LEVEL  message`` with ANSI colored level tags."""

    def __init__(self) -> None:
        super().__init__(datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        timestamp = f"{_BRIGHT_CYAN}[{self.formatTime(record, self.datefmt)}]{_RESET}"
        tag_style = _LEVEL_STYLES.get(record.levelno, "")
        level = f"{tag_style}{_BOLD} {record.levelname} {_RESET}"
        line = f"{timestamp} {level} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def debug_enabled(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get("DEBUG", "").lower() == "true"


def setup_logging(
    level: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Configure the root logger for the slideshow process."""
    env = os.environ if environ is None else environ
    log_path = env.get("TTY_SLIDE_LOG", "")

    handlers: list[logging.Handler] = []
    if debug_enabled(env):
        stream = logging.StreamHandler()
        stream.setFormatter(ColorFormatter())
        handlers.append(stream)
    if log_path:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handlers.append(file_handler)
    if not handlers:
        handlers.append(logging.NullHandler())

    default_level = "debug" if debug_enabled(env) else "info"
    logging.basicConfig(
        level=getattr(logging, (level or default_level).upper()),
        handlers=handlers,
        force=True,
    )
