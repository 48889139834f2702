"""tty-slide: terminal slideshow of ASCII-art images."""

# Control and input
from ttyslide.control import ControlState
from ttyslide.input import InputListener
from ttyslide.keys import Key, KeyId, decode_key, split_keys

# Timing
from ttyslide.animation import AnimationMode, AnimationState, Animator
from ttyslide.retry import backoff_delay, resilient_fetch
from ttyslide.sizing import SizingDirective, compute_sizing, reserved_rows_for

# Slideshow
from ttyslide.config import Config, Directory, Predefined, classify_source
from ttyslide.controller import Phase, SlideController
from ttyslide.errors import (
    DownloadError,
    OutputDirectoryError,
    RenderError,
    SlideError,
    SourceError,
)
from ttyslide.models import ImageDescriptor

# Terminal
from ttyslide.terminal import ProcessTerminal, Terminal

__all__ = [
    "AnimationMode",
    "AnimationState",
    "Animator",
    "Config",
    "ControlState",
    "Directory",
    "DownloadError",
    "ImageDescriptor",
    "InputListener",
    "Key",
    "KeyId",
    "OutputDirectoryError",
    "Phase",
    "Predefined",
    "ProcessTerminal",
    "RenderError",
    "SizingDirective",
    "SlideController",
    "SlideError",
    "SourceError",
    "Terminal",
    "backoff_delay",
    "classify_source",
    "compute_sizing",
    "decode_key",
    "reserved_rows_for",
    "resilient_fetch",
    "split_keys",
]
