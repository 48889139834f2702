"""Map terminal dimensions to the dimension the converter should honour."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

MIN_HEIGHT = 10
MIN_WIDTH = 40
HORIZONTAL_MARGIN = 4
WIDE_ASPECT_RATIO = 2.5

# Progress bar plus the blank lines around it.
BASE_RESERVED_ROWS = 3
# Separator lines, source line, caption, a wrapped description and tags.
CAPTION_RESERVED_ROWS = 7


@dataclass(frozen=True)
class SizingDirective:
    mode: Literal["width", "height"]
    value: int


def compute_sizing(columns: int, rows: int, reserved_rows: int) -> SizingDirective:
    """Choose whether to constrain the image by width or by height.

    Very wide terminals are constrained by height so the art is not stretched
    past the visible rows.
    """
    available_height = max(MIN_HEIGHT, rows - reserved_rows)
    available_width = max(MIN_WIDTH, columns - HORIZONTAL_MARGIN)
    aspect_ratio = available_width / available_height
    if aspect_ratio > WIDE_ASPECT_RATIO:
        return SizingDirective("height", available_height)
    return SizingDirective("width", available_width)


def reserved_rows_for(caption: bool) -> int:
    return BASE_RESERVED_ROWS + (CAPTION_RESERVED_ROWS if caption else 0)
