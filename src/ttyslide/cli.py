"""Entry point: CLI args, dependency checks, signal handling."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Sequence

from ttyslide import style
from ttyslide.animation import Animator
from ttyslide.config import Config, config_from_args, parse_args
from ttyslide.control import ControlState
from ttyslide.controller import SlideController
from ttyslide.download import Downloader
from ttyslide.input import InputListener
from ttyslide.log import setup_logging
from ttyslide.render import INSTALL_HINTS, Jp2aRenderer, jp2a_available
from ttyslide.sources import SourceRegistry
from ttyslide.terminal import ProcessTerminal

logger = logging.getLogger(__name__)


# ============================================================================
# Help
# ============================================================================


def help_text() -> str:
    head = style.bold(style.bright_cyan("TTY Slide")) + " - Terminal multi-source slideshow viewer"
    usage = f"{style.bold('Usage:')} tty-slide [options]"

    def section(title: str, rows: list[tuple[str, str]]) -> list[str]:
        lines = ["", style.bold(style.yellow(title))]
        for flag, text in rows:
            lines.append(f"  {style.green(flag.ljust(20))} {text}")
        return lines

    options = section(
        "Options:",
        [
            ("--source=<name>", "waifu, pexels, random (default) or a directory path"),
            ("--nsfw", "Include NSFW tags (waifu only)"),
            ("--interval=<sec>", "Seconds between images (default: 10)"),
            ("--dir=<path>", "Directory for saved images (default: ./slides)"),
            ("--no-save", "Do not save images"),
            ("--tags=<a,b>", "Comma separated tags or search terms"),
            ("--colors", "Render in color"),
            ("--fill", "Fill character cells with background color"),
            ("--caption", "Show source, artist and tags under each image"),
            ("--retries=<n>", "Attempts per remote request (default: 3)"),
            ("--timeout=<sec>", "Request timeout in seconds (default: 30)"),
            ("--list-sources", "List available sources"),
            ("--list-tags", "List available tags for every source"),
            ("--log-level=<lvl>", "debug, info, warning or error"),
            ("-h, --help", "Show this help"),
        ],
    )
    controls = section(
        "Controls:",
        [
            ("space", "Pause / resume"),
            ("n, right arrow", "Next image"),
            ("s", "Save current image"),
            ("q, escape", "Quit"),
            ("ctrl+c", "Force quit"),
        ],
    )
    env = section(
        "Environment:",
        [
            ("PEXELS_API_KEY", "API key for the pexels source (.env is read too)"),
            ("DEBUG=true", "Log to stderr"),
            ("TTY_SLIDE_LOG", "Log to the given file"),
        ],
    )
    return "\n".join([head, "", usage, *options, *controls, *env])


# ============================================================================
# Run
# ============================================================================


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, controller: SlideController) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, controller.stop)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handlers not supported for %s", sig.name)


async def _async_main(config: Config) -> int:
    terminal = ProcessTerminal()
    control = ControlState()
    animator = Animator(terminal, control)
    registry = SourceRegistry()
    controller = SlideController(
        config,
        terminal=terminal,
        control=control,
        animator=animator,
        registry=registry,
        downloader=Downloader(),
        renderer=Jp2aRenderer(terminal),
    )

    loop = asyncio.get_running_loop()
    _install_signal_handlers(loop, controller)

    async with InputListener(terminal) as listener:
        controller.bind_keys(listener)
        return await controller.run()


def main(argv: Sequence[str] | None = None) -> None:
    args: argparse.Namespace = parse_args(argv)
    setup_logging(args.log_level)

    if args.help:
        print(help_text())
        sys.exit(0)

    if args.list_sources:
        print("\n".join(SourceRegistry().describe_sources()))
        sys.exit(0)

    if args.list_tags:
        print("\n".join(SourceRegistry().describe_tags()))
        sys.exit(0)

    if not jp2a_available():
        print(style.red("Error: jp2a is not installed"), file=sys.stderr)
        print("Install it with one of:", file=sys.stderr)
        for hint in INSTALL_HINTS:
            print(hint, file=sys.stderr)
        sys.exit(1)

    config = config_from_args(args)
    code = asyncio.run(_async_main(config))
    if code != 0:
        print(style.red(f"Error: could not create output directory {config.output_dir}"), file=sys.stderr)
    sys.exit(code)


if __name__ == "__main__":
    main()
