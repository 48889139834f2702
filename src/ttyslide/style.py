"""ANSI styling helpers for captions, panels and help output."""

from __future__ import annotations

_RESET = "\033[0m"
_BOLD = "\033[1m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_WHITE = "\033[37m"
_BRIGHT_RED = "\033[91m"
_BRIGHT_CYAN = "\033[96m"
_BG_BRIGHT_WHITE = "\033[107m"


def _wrap(code: str, text: str) -> str:
    return f"{code}{text}{_RESET}"


def bold(text: str) -> str:
    return _wrap(_BOLD, text)


def red(text: str) -> str:
    return _wrap(_RED, text)


def green(text: str) -> str:
    return _wrap(_GREEN, text)


def yellow(text: str) -> str:
    return _wrap(_YELLOW, text)


def white(text: str) -> str:
    return _wrap(_WHITE, text)


def bright_red(text: str) -> str:
    return _wrap(_BRIGHT_RED, text)


def bright_cyan(text: str) -> str:
    return _wrap(_BRIGHT_CYAN, text)


def bg_bright_white(text: str) -> str:
    return _wrap(_BG_BRIGHT_WHITE, text)
