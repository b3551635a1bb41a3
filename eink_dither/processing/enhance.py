from __future__ import annotations

import math
from typing import List

from ..buffer import ImageBuffer
from ..errors import InvalidConfig
from .colorspace import luminance

_IDENTITY = list(range(256))


def gamma_lut(gamma: float) -> List[int]:
    if gamma <= 0:
        raise InvalidConfig(f"gamma must be a positive number, got {gamma!r}")
    inv = 1.0 / gamma
    return [
        min(255, max(0, int(((value / 255.0) ** inv) * 255 + 0.5)))
        for value in range(256)
    ]


def apply_gamma(image: ImageBuffer, gamma: float) -> ImageBuffer:
    lut = gamma_lut(gamma)
    if abs(gamma - 1.0) < 1e-3 or image.pixel_count == 0:
        return ImageBuffer(bytes(image.data), image.width, image.height)
    # Alpha passes through an identity table.
    corrected = image.to_image().point(lut * 3 + _IDENTITY)
    return ImageBuffer(corrected.tobytes(), image.width, image.height)


def local_window_size(width: int, height: int) -> int:
    return max(8, min(32, min(width, height) // 16))


def _summed_area_tables(image: ImageBuffer):
    """Integral images of luminance and squared luminance, padded by one row/column."""

    width, height = image.width, image.height
    data = image.data
    stride = width + 1
    sums = [0.0] * (stride * (height + 1))
    squares = [0.0] * (stride * (height + 1))
    for y in range(height):
        row_sum = 0.0
        row_sq = 0.0
        above = y * stride
        current = (y + 1) * stride
        for x in range(width):
            index = (y * width + x) * 4
            lum = luminance(data[index], data[index + 1], data[index + 2])
            row_sum += lum
            row_sq += lum * lum
            sums[current + x + 1] = sums[above + x + 1] + row_sum
            squares[current + x + 1] = squares[above + x + 1] + row_sq
    return sums, squares


def enhance_local_contrast(image: ImageBuffer, strength: float) -> ImageBuffer:
    """Stretch each pixel against the luminance statistics of its neighbourhood.

    Mean and standard deviation come from a square window of
    ``local_window_size`` pixels (clipped at the borders), read in constant
    time from summed-area tables. Each RGB channel is remapped as
    ``mean + (value - mean) / (std + 1) * std * (1 + strength)`` and
    clamped to ``[0, 255]``. Alpha is left as is.
    """

    width, height = image.width, image.height
    if image.pixel_count == 0:
        return ImageBuffer(bytes(image.data), width, height)

    half = local_window_size(width, height) // 2
    sums, squares = _summed_area_tables(image)
    stride = width + 1
    gain = 1.0 + strength
    src = image.data
    out = bytearray(src)

    for y in range(height):
        y0 = max(0, y - half)
        y1 = min(height - 1, y + half) + 1
        for x in range(width):
            x0 = max(0, x - half)
            x1 = min(width - 1, x + half) + 1
            count = (x1 - x0) * (y1 - y0)
            total = sums[y1 * stride + x1] - sums[y0 * stride + x1] - sums[y1 * stride + x0] + sums[y0 * stride + x0]
            total_sq = (
                squares[y1 * stride + x1]
                - squares[y0 * stride + x1]
                - squares[y1 * stride + x0]
                + squares[y0 * stride + x0]
            )
            mean = total / count
            std = math.sqrt(max(0.0, total_sq / count - mean * mean))
            scale = std * gain / (std + 1.0)

            index = (y * width + x) * 4
            for channel in range(3):
                value = mean + (src[index + channel] - mean) * scale
                out[index + channel] = int(round(min(255.0, max(0.0, value))))

    return ImageBuffer(bytes(out), width, height)
