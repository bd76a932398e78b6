"""Packed ARGB color helpers.

Colors are 32-bit ``0xAARRGGBB`` values kept in signed form, the way the
persisted catalog and the deleted-colors JSON have always stored them.
"""

import colorsys
import re

_INT32_MIN = -(2**31)
_UINT32_MAX = 2**32 - 1

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def to_signed_argb(value: int) -> int:
    """Normalize a packed color to its signed 32-bit form.

    Args:
        value: Signed or unsigned 32-bit packed color

    Returns:
        The same color as a signed 32-bit integer

    Raises:
        ValueError: If value does not fit in 32 bits
    """
    if value < _INT32_MIN or value > _UINT32_MAX:
        raise ValueError(f"Color value out of 32-bit range: {value}")
    value &= _UINT32_MAX
    return value - 2**32 if value >= 2**31 else value


def argb(alpha: int, red: int, green: int, blue: int) -> int:
    """Pack channels (0-255 each) into a signed ARGB integer."""
    for channel in (alpha, red, green, blue):
        if not 0 <= channel <= 255:
            raise ValueError(f"Channel out of range: {channel}")
    return to_signed_argb((alpha << 24) | (red << 16) | (green << 8) | blue)


def channels(color: int) -> tuple[int, int, int, int]:
    """Unpack a color into (alpha, red, green, blue)."""
    unsigned = color & _UINT32_MAX
    return (
        (unsigned >> 24) & 0xFF,
        (unsigned >> 16) & 0xFF,
        (unsigned >> 8) & 0xFF,
        unsigned & 0xFF,
    )


def hue_of(color: int) -> float:
    """Hue of a packed color in degrees, within [0, 360).

    Alpha is ignored. Achromatic colors (grays) have hue 0.
    """
    _, red, green, blue = channels(color)
    hue, _, _ = colorsys.rgb_to_hsv(red / 255.0, green / 255.0, blue / 255.0)
    degrees = hue * 360.0
    return 0.0 if degrees >= 360.0 else degrees


def parse_hex_color(text: str) -> int:
    """Parse ``#RRGGBB`` or ``#AARRGGBB`` (leading ``#`` optional).

    Six-digit input is treated as fully opaque.

    Raises:
        ValueError: If text is not a valid hex color
    """
    match = _HEX_PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid hex color: {text!r}")

    digits = match.group(1)
    if len(digits) == 6:
        digits = "FF" + digits
    return to_signed_argb(int(digits, 16))


def format_hex(color: int) -> str:
    """Format a packed color as ``#AARRGGBB``."""
    return f"#{color & _UINT32_MAX:08X}"
