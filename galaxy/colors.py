"""Colour helpers for star generation."""

import colorsys
from typing import Tuple

Color = Tuple[float, float, float]


def parse_hex_color(value: str) -> Color:
    """Convert '#rrggbb' (or 'rrggbb') to an RGB tuple in the 0-1 range."""
    text = value.strip().lstrip("#") if isinstance(value, str) else ""
    if len(text) != 6:
        raise ValueError(f"Expected a 6-digit hex colour, got {value!r}")
    try:
        raw = int(text, 16)
    except ValueError:
        raise ValueError(f"Expected a 6-digit hex colour, got {value!r}") from None
    return (
        ((raw >> 16) & 0xFF) / 255.0,
        ((raw >> 8) & 0xFF) / 255.0,
        (raw & 0xFF) / 255.0,
    )


def lerp_color(start: Color, end: Color, t: float) -> Color:
    """Linear interpolation from start toward end; t is clamped to [0, 1]."""
    t = max(0.0, min(1.0, t))
    return (
        start[0] + (end[0] - start[0]) * t,
        start[1] + (end[1] - start[1]) * t,
        start[2] + (end[2] - start[2]) * t,
    )


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> Color:
    # colorsys orders the arguments hue, lightness, saturation
    return colorsys.hls_to_rgb(hue % 1.0, lightness, saturation)


def rgb_to_hue(color: Color) -> float:
    return colorsys.rgb_to_hls(*color)[0]
