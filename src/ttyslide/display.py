"""Line builders for everything the slideshow draws besides the image itself."""

from __future__ import annotations

from ttyslide import style
from ttyslide.models import ImageDescriptor
from ttyslide.utils import center, truncate_to_width, visible_width, wrap_words

PLAYING_GLYPH = "▶"
PAUSED_GLYPH = "⏸"

_BAR_MAX_WIDTH = 60
_BAR_FRACTION = 0.6
_PANEL_MAX_WIDTH = 70


# ---------------------------------------------------------------------------
# Animation lines
# ---------------------------------------------------------------------------


def spinner_line(frame: str, message: str, columns: int) -> str:
    text = truncate_to_width(f"{frame} {message}", max(1, columns - 1))
    return center(style.bright_cyan(text), columns)


def progress_line(done: int, total: int, columns: int, *, paused: bool = False) -> str:
    """Centered progress bar with a play/pause glyph in front."""
    bar_width = max(10, min(_BAR_MAX_WIDTH, int(columns * _BAR_FRACTION)))
    progress = done / total if total > 0 else 1.0
    filled = int(progress * bar_width)
    bar = style.bg_bright_white("█" * filled) + "░" * (bar_width - filled)
    glyph = style.yellow(PAUSED_GLYPH) if paused else style.green(PLAYING_GLYPH)
    return center(f"{glyph} {bar}", columns)


# ---------------------------------------------------------------------------
# Caption block
# ---------------------------------------------------------------------------


def caption_lines(descriptor: ImageDescriptor, columns: int) -> list[str]:
    """Metadata block printed under the image when captions are enabled."""
    separator = style.bright_cyan("=" * columns)
    lines = ["", separator]

    source_info = f"📷 Source: {style.bold(style.white(descriptor.source.upper()))}"
    if descriptor.artist:
        source_info += f" | 🎨 {style.bold(style.white(descriptor.artist))}"
    lines.append(source_info)

    if descriptor.caption:
        lines.append(style.yellow(descriptor.caption))

    if descriptor.description:
        for line in wrap_words(f"📝 {descriptor.description}", columns):
            lines.append(style.green(line))

    if descriptor.tags:
        for line in wrap_words(f"🏷️  {' • '.join(descriptor.tags)}", columns):
            lines.append(style.bright_cyan(line))

    lines.append(separator)
    return lines


# ---------------------------------------------------------------------------
# Error panel
# ---------------------------------------------------------------------------


def error_panel(title: str, message: str, columns: int, rows: int) -> list[str]:
    """A boxed, centered explanation followed by a "continuing" note.

    The returned lines include the blank lines needed to centre the box
    vertically in a ``columns`` x ``rows`` terminal.
    """
    inner = max(20, min(_PANEL_MAX_WIDTH, columns - 4) - 4)
    body: list[str] = []
    for paragraph in message.splitlines() or [""]:
        wrapped = wrap_words(paragraph, inner) or [""]
        body.extend(truncate_to_width(line, inner) for line in wrapped)
    body.append("")
    body.append("Continuing with the next image...")

    top = "╭" + "─" * (inner + 2) + "╮"
    bottom = "╰" + "─" * (inner + 2) + "╯"
    heading = truncate_to_width(f"✗ {title}", inner)

    box = [style.red(top), _panel_row(style.bold(style.bright_red(heading)), inner)]
    box.append(_panel_row("", inner))
    box.extend(_panel_row(line, inner) for line in body)
    box.append(style.red(bottom))

    padding_top = max(0, (rows - len(box)) // 2)
    return [""] * padding_top + [center(line, columns) for line in box]


def _panel_row(text: str, inner: int) -> str:
    fill = " " * max(0, inner - visible_width(text))
    return f"{style.red('│')} {text}{fill} {style.red('│')}"
