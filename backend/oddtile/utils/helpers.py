"""Utility helper functions."""
import re
from typing import Tuple


_HSL_PATTERN = re.compile(r"^hsl\((\d+), (\d+)%, (\d+)%\)$")


def format_hsl(hue: int, saturation: int, lightness: int) -> str:
    """
    Format an HSL color the way the game client expects it.

    Args:
        hue: Hue in degrees.
        saturation: Saturation in percent.
        lightness: Lightness in percent.

    Returns:
        String such as ``hsl(120, 70%, 50%)``.
    """
    return f"hsl({hue}, {saturation}%, {lightness}%)"


def parse_hsl(css: str) -> Tuple[int, int, int]:
    """
    Parse a string produced by :func:`format_hsl`.

    Args:
        css: Color string.

    Returns:
        Tuple of (hue, saturation, lightness).

    Raises:
        ValueError: If the string is not in the expected format.
    """
    match = _HSL_PATTERN.match(css)
    if not match:
        raise ValueError(f"Invalid HSL color: '{css}'")
    hue, saturation, lightness = (int(g) for g in match.groups())
    return hue, saturation, lightness


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))
