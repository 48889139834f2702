"""Raw keystroke decoding for the slideshow control surface.

Maps the handful of byte shapes the slideshow reacts to (single control or
printable bytes and the three-byte CSI arrow sequences) to named key
identifiers such as ``"space"`` or ``"right"``.  Anything else is ignored;
this is deliberately not a general ANSI parser.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str


# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants."""

    escape = "escape"
    space = "space"
    enter = "enter"
    backspace = "backspace"
    ctrl_c = "ctrl+c"
    up = "up"
    down = "down"
    left = "left"
    right = "right"


# ---------------------------------------------------------------------------
# Byte tables
# ---------------------------------------------------------------------------

ESC = 0x1B
CSI_BRACKET = 0x5B  # '['

SINGLE_BYTE_KEYS: dict[int, KeyId] = {
    ESC: Key.escape,
    0x20: Key.space,
    0x0D: Key.enter,
    0x7F: Key.backspace,
    0x03: Key.ctrl_c,
}

ARROW_KEYS: dict[int, KeyId] = {
    0x41: Key.up,  # 'A'
    0x42: Key.down,  # 'B'
    0x43: Key.right,  # 'C'
    0x44: Key.left,  # 'D'
}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_key(data: bytes) -> KeyId | None:
    """Decode one key unit of 1-3 raw bytes.

    Returns the key identifier, or ``None`` when the bytes do not match any
    shape the slideshow knows about.
    """
    if len(data) == 1:
        code = data[0]
        named = SINGLE_BYTE_KEYS.get(code)
        if named is not None:
            return named
        if 32 <= code <= 126:
            return chr(code).lower()
        return None

    if len(data) == 3 and data[0] == ESC and data[1] == CSI_BRACKET:
        return ARROW_KEYS.get(data[2])

    return None


def split_keys(data: bytes) -> list[bytes]:
    """Split one read chunk into key units for :func:`decode_key`.

    ``ESC [ X`` triples stay together; every other byte is its own unit.
    A chunk such as ``b"qq"`` therefore yields two keypresses instead of one
    unmatched two-byte sequence.
    """
    units: list[bytes] = []
    i = 0
    while i < len(data):
        if data[i] == ESC and i + 2 < len(data) and data[i + 1] == CSI_BRACKET:
            units.append(data[i : i + 3])
            i += 3
            continue
        units.append(data[i : i + 1])
        i += 1
    return units
