from __future__ import annotations

import math
from typing import Sequence, Tuple

from ..buffer import Color, ImageBuffer
from ..config import ColorMetric
from ..errors import EmptyPalette
from .colorspace import rgb_to_lab

RGB = Tuple[int, int, int]


def manhattan_distance(sample: RGB, target: RGB) -> float:
    return float(abs(sample[0] - target[0]) + abs(sample[1] - target[1]) + abs(sample[2] - target[2]))


def euclidean_distance(sample: RGB, target: RGB) -> float:
    dr = sample[0] - target[0]
    dg = sample[1] - target[1]
    db = sample[2] - target[2]
    return math.sqrt(dr * dr + dg * dg + db * db)


def perceptual_weighted_distance(sample: RGB, target: RGB) -> float:
    """Channel-weighted RGB distance that tracks eye sensitivity.

    Red and blue weights shift with the mean red level of the two colors;
    green carries a fixed weight of 4. Far cheaper than a LAB round-trip and
    close enough for small e-ink palettes.
    """

    dr = sample[0] - target[0]
    dg = sample[1] - target[1]
    db = sample[2] - target[2]
    avg_r = (sample[0] + target[0]) / 2
    weight_r = 2 + avg_r / 256
    weight_g = 4
    weight_b = 2 + (255 - avg_r) / 256
    return math.sqrt(weight_r * dr * dr + weight_g * dg * dg + weight_b * db * db)


def delta_e_distance(sample: RGB, target: RGB) -> float:
    """Unweighted Euclidean distance between the two colors in LAB."""

    l1, a1, b1 = rgb_to_lab(sample[0], sample[1], sample[2])
    l2, a2, b2 = rgb_to_lab(target[0], target[1], target[2])
    return math.sqrt((l2 - l1) ** 2 + (a2 - a1) ** 2 + (b2 - b1) ** 2)


_METRICS = {
    ColorMetric.MANHATTAN: manhattan_distance,
    ColorMetric.EUCLIDEAN: euclidean_distance,
    ColorMetric.PERCEPTUAL_WEIGHTED: perceptual_weighted_distance,
    ColorMetric.DELTA_E: delta_e_distance,
}


def distance_function(metric: ColorMetric):
    return _METRICS[ColorMetric(metric)]


def color_distance(sample: RGB, target: RGB, metric: ColorMetric) -> float:
    return distance_function(metric)(sample, target)


def nearest_palette_index(rgb: RGB, palette: Sequence[Color], metric: ColorMetric) -> int:
    if not palette:
        raise EmptyPalette("Palette is empty; cannot determine the closest color")

    distance = distance_function(metric)
    best_index = 0
    best_distance = float("inf")
    for index, color in enumerate(palette):
        candidate = distance(rgb, color)
        if candidate < best_distance:
            best_distance = candidate
            best_index = index
    return best_index


def nearest_palette_color(rgb: RGB, palette: Sequence[Color], metric: ColorMetric) -> Color:
    return palette[nearest_palette_index(rgb, palette, metric)]


def quantize_nearest(image: ImageBuffer, palette: Sequence[Color], metric: ColorMetric) -> ImageBuffer:
    """Map every pixel to its closest palette color without diffusing error."""

    image.validate()
    if not palette:
        raise EmptyPalette("Palette is empty; cannot determine the closest color")

    src = image.data
    out = bytearray(src)
    lookup = {}
    for index in range(0, len(src), 4):
        rgb = (src[index], src[index + 1], src[index + 2])
        color = lookup.get(rgb)
        if color is None:
            color = nearest_palette_color(rgb, palette, metric)
            lookup[rgb] = color
        out[index : index + 3] = bytes(color)
    return ImageBuffer(bytes(out), image.width, image.height)
