from __future__ import annotations

from functools import lru_cache
from typing import Tuple

# D65 reference white
_XN = 0.95047
_YN = 1.00000
_ZN = 1.08883

_LAB_EPSILON = 0.008856


def _srgb_to_linear(value: float) -> float:
    return ((value + 0.055) / 1.055) ** 2.4 if value > 0.04045 else value / 12.92


def _lab_f(t: float) -> float:
    return t ** (1.0 / 3.0) if t > _LAB_EPSILON else 7.787 * t + 16.0 / 116.0


@lru_cache(maxsize=65536)
def rgb_to_lab(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """Convert an 8-bit sRGB triple to CIE LAB under the D65 illuminant."""

    rl = _srgb_to_linear(r / 255.0)
    gl = _srgb_to_linear(g / 255.0)
    bl = _srgb_to_linear(b / 255.0)

    x = rl * 0.4124564 + gl * 0.3575761 + bl * 0.1804375
    y = rl * 0.2126729 + gl * 0.7151522 + bl * 0.0721750
    z = rl * 0.0193339 + gl * 0.1191920 + bl * 0.9503041

    fx = _lab_f(x / _XN)
    fy = _lab_f(y / _YN)
    fz = _lab_f(z / _ZN)

    return 116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)


def luminance(r: float, g: float, b: float) -> float:
    return 0.299 * r + 0.587 * g + 0.114 * b
