"""Color encoding for palette qubits.

A color (h, s, l) with every channel in [0, 1] prepares a qubit with
Ry(pi*l) followed by Rz(2*pi*h); lightness is the polar angle and hue the
azimuth on the Bloch sphere. Reading a color back inverts that through the
qubit's expectation values. Saturation is not encoded in the qubit.
"""

from __future__ import annotations

import math
import re

HSL = tuple[float, float, float]

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def hsl_to_angles(hsl: HSL) -> tuple[float, float]:
    """Returns (ry_angle, rz_angle) = (pi*l, 2*pi*h)."""
    h, _, l = hsl
    return math.pi * l, 2 * math.pi * h


def expectation_to_hsl(x: float, y: float, z: float, saturation: float) -> HSL:
    """Bloch vector -> color; NaN components fall back to the |0> direction."""
    x = 0.0 if x is None or math.isnan(x) else x
    y = 0.0 if y is None or math.isnan(y) else y
    z = 1.0 if z is None or math.isnan(z) else z

    h = math.atan2(y, x) / (2 * math.pi)
    l = math.atan2(math.sqrt(x * x + y * y), z) / math.pi

    h = ((h % 1) + 1) % 1
    l = max(0.0, min(1.0, l))
    return (h, saturation, l)


def hex_to_hsl(value: str) -> HSL:
    """'#rrggbb' -> (h, s, l). Unparseable input gives mid-grey (0, 0, 0.5)."""
    match = _HEX_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        return (0.0, 0.0, 0.5)

    r, g, b = (int(part, 16) / 255 for part in match.groups())
    high = max(r, g, b)
    low = min(r, g, b)
    h = s = 0.0
    l = (high + low) / 2

    if high != low:
        d = high - low
        s = d / (2 - high - low) if l > 0.5 else d / (high + low)
        if high == r:
            h = ((g - b) / d + (6 if g < b else 0)) / 6
        elif high == g:
            h = ((b - r) / d + 2) / 6
        else:
            h = ((r - g) / d + 4) / 6

    return (h, s, l)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(hsl: HSL) -> tuple[int, int, int]:
    """(h, s, l) -> (r, g, b) with 0-255 integer channels."""
    h, s, l = hsl
    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)
    return tuple(int(round(max(0.0, min(1.0, c)) * 255)) for c in (r, g, b))


def hsl_to_rgb_string(hsl: HSL) -> str:
    r, g, b = hsl_to_rgb(hsl)
    return f"rgb({r}, {g}, {b})"


def hsl_to_hex(hsl: HSL) -> str:
    r, g, b = hsl_to_rgb(hsl)
    return f"#{r:02x}{g:02x}{b:02x}"
