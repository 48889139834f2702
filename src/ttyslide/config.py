"""Run configuration: command-line parsing, environment, source selection.

The :class:`Config` is built once at startup and never mutated.  Image
sources are named by a single ``--source`` value which is either a
predefined catalog (``waifu``, ``pexels``), ``random``, or a filesystem
path; :func:`classify_source` turns that string into a tagged
:data:`SourceSpec`.
"""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

RANDOM_SOURCE = "random"
PREDEFINED_SOURCES = ("waifu", "pexels")

NSFW_TAGS = ("ass", "hentai", "milf", "oral", "paizuri", "ecchi", "ero")

DEFAULT_INTERVAL_SECONDS = 10
DEFAULT_OUTPUT_DIR = "./slides"
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT_SECONDS = 30.0


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Config:
    source: str = RANDOM_SOURCE
    include_nsfw: bool = False
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    output_dir: str = DEFAULT_OUTPUT_DIR
    colors: bool = False
    fill: bool = False
    caption: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    no_save: bool = False
    custom_tags: tuple[str, ...] | None = None
    pexels_api_key: str | None = None


# ---------------------------------------------------------------------------
# Source classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Predefined:
    name: str


@dataclass(frozen=True)
class Directory:
    path: Path


SourceSpec = Predefined | Directory


def looks_like_path(source: str) -> bool:
    return "/" in source or "\\" in source or source.startswith((".", "~"))


def classify_source(source: str) -> SourceSpec | None:
    """Classify a ``--source`` value.

    ``random`` and the catalog names are :class:`Predefined`; anything that
    looks like a path is a :class:`Directory`; everything else is unknown
    and yields ``None``.
    """
    if source == RANDOM_SOURCE or source in PREDEFINED_SOURCES:
        return Predefined(source)
    if looks_like_path(source):
        return Directory(Path(source).expanduser())
    return None


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tty-slide",
        description="Terminal multi-source slideshow viewer",
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="Show help and exit")
    parser.add_argument("--source", default=RANDOM_SOURCE, help="waifu, pexels, random, or a directory")
    parser.add_argument("--nsfw", action="store_true", help="Include NSFW tags (waifu only)")
    parser.add_argument("--interval", default=None, help="Seconds between images")
    parser.add_argument("--dir", dest="output_dir", default=DEFAULT_OUTPUT_DIR, help="Directory for saved images")
    parser.add_argument("--no-save", action="store_true", help="Do not save images to disk")
    parser.add_argument("--tags", default=None, help="Comma separated tags or search terms")
    parser.add_argument("--colors", action="store_true", help="Render in color")
    parser.add_argument("--fill", action="store_true", help="Fill character cells with background color")
    parser.add_argument("--caption", action="store_true", help="Show source, artist and tags")
    parser.add_argument("--retries", default=None, help="Attempts per remote request")
    parser.add_argument("--timeout", default=None, help="Seconds before a remote request is abandoned")
    parser.add_argument("--list-sources", action="store_true", help="List sources and exit")
    parser.add_argument("--list-tags", action="store_true", help="List tags and exit")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Log level when logging is enabled",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _positive_number(raw: str | None, kind: type[int] | type[float], name: str) -> int | float | None:
    if raw is None:
        return None
    try:
        value = kind(raw)
    except ValueError:
        logger.warning("Ignoring invalid --%s value: %r", name, raw)
        return None
    if value <= 0:
        logger.warning("Ignoring non-positive --%s value: %r", name, raw)
        return None
    return value


def parse_tags(raw: str | None) -> tuple[str, ...] | None:
    if not raw:
        return None
    tags = tuple(tag.strip() for tag in raw.split(",") if tag.strip())
    return tags or None


def load_environment(cwd: str | os.PathLike[str] | None = None) -> dict[str, str]:
    """Merge ``.env`` from *cwd* under the process environment."""
    env_path = Path(cwd or os.getcwd()) / ".env"
    values: dict[str, str] = {}
    if env_path.is_file():
        values.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})
    values.update(os.environ)
    return values


def config_from_args(args: argparse.Namespace, environ: Mapping[str, str] | None = None) -> Config:
    """Build the immutable run configuration from parsed arguments."""
    env = environ if environ is not None else load_environment()

    no_save = bool(args.no_save)
    source = args.source
    if isinstance(classify_source(source), Directory):
        no_save = True
        logger.info("Directory source detected (%s), saving disabled", source)

    custom_tags = parse_tags(args.tags)
    include_nsfw = bool(args.nsfw)
    if custom_tags and any(tag.lower() in NSFW_TAGS for tag in custom_tags):
        include_nsfw = True

    interval = _positive_number(args.interval, int, "interval")
    retries = _positive_number(args.retries, int, "retries")
    timeout = _positive_number(args.timeout, float, "timeout")

    return Config(
        source=source,
        include_nsfw=include_nsfw,
        interval_seconds=int(interval or DEFAULT_INTERVAL_SECONDS),
        output_dir=args.output_dir,
        colors=bool(args.colors),
        fill=bool(args.fill),
        caption=bool(args.caption),
        max_retries=int(retries or DEFAULT_MAX_RETRIES),
        timeout=float(timeout or DEFAULT_TIMEOUT_SECONDS),
        no_save=no_save,
        custom_tags=custom_tags,
        pexels_api_key=env.get("PEXELS_API_KEY") or None,
    )
