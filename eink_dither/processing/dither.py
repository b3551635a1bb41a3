from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, Sequence, Tuple

from ..buffer import Color, ImageBuffer
from ..config import Algorithm, ColorMetric
from ..errors import EmptyPalette, InvalidConfig
from .palette import nearest_palette_color

# Accumulator bounds when error clamping is on: the 0..255 range plus half a
# range of slack on either side. A tunable, not a derived limit.
ERROR_FLOOR = -128.0
ERROR_CEILING = 383.0

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class DiffusionKernel:
    """Error-diffusion weights as ``(dx, dy, numerator)`` over ``divisor``.

    Offsets are given for a left-to-right scan; ``dx`` is negated on rows
    scanned right-to-left.
    """

    name: str
    divisor: int
    offsets: Tuple[Tuple[int, int, int], ...]

    def weights(self) -> Iterator[Tuple[int, int, float]]:
        for dx, dy, numerator in self.offsets:
            yield dx, dy, numerator / self.divisor

    @property
    def total_weight(self) -> float:
        return sum(weight for _, _, weight in self.weights())

    def mirrored(self) -> Tuple[Tuple[int, int, float], ...]:
        return tuple((-dx, dy, weight) for dx, dy, weight in self.weights())


FLOYD_STEINBERG = DiffusionKernel(
    "floyd-steinberg",
    16,
    ((1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1)),
)

SIERRA = DiffusionKernel(
    "sierra",
    32,
    (
        (1, 0, 5), (2, 0, 3),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 5), (1, 1, 4), (2, 1, 2),
        (-1, 2, 2), (0, 2, 3), (1, 2, 2),
    ),
)

# 15/16 of the error is passed on: (2, 0) carries 2/16 rather than the
# textbook 3/16.
SIERRA_TWO_ROW = DiffusionKernel(
    "sierra-two-row",
    16,
    (
        (1, 0, 4), (2, 0, 2),
        (-2, 1, 1), (-1, 1, 2), (0, 1, 3), (1, 1, 2), (2, 1, 1),
    ),
)

STUCKI = DiffusionKernel(
    "stucki",
    42,
    (
        (1, 0, 8), (2, 0, 4),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
        (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
    ),
)

# Only 6/8 of the error is passed on; the remaining quarter is dropped.
ATKINSON = DiffusionKernel(
    "atkinson",
    8,
    ((1, 0, 1), (2, 0, 1), (-1, 1, 1), (0, 1, 1), (1, 1, 1), (0, 2, 1)),
)


def kernel_for(algorithm: Algorithm) -> DiffusionKernel:
    if algorithm == Algorithm.FLOYD_STEINBERG:
        return FLOYD_STEINBERG
    elif algorithm == Algorithm.SIERRA:
        return SIERRA
    elif algorithm == Algorithm.SIERRA_TWO_ROW:
        return SIERRA_TWO_ROW
    elif algorithm == Algorithm.STUCKI:
        return STUCKI
    elif algorithm == Algorithm.ATKINSON:
        return ATKINSON
    raise InvalidConfig(f"Unsupported dithering algorithm: {algorithm!r}")


def _channel(value: float) -> int:
    return min(255, max(0, math.floor(value + 0.5)))


class ErrorAccumulator:
    """Floating-point working copy of an RGBA buffer that carries diffused error."""

    def __init__(self, image: ImageBuffer, clamp: bool) -> None:
        self.width = image.width
        self.height = image.height
        self.clamp = clamp
        self.values = [float(value) for value in image.data]

    def current_color(self, x: int, y: int) -> RGB:
        index = (y * self.width + x) * 4
        values = self.values
        return _channel(values[index]), _channel(values[index + 1]), _channel(values[index + 2])

    def add(self, x: int, y: int, error: Tuple[float, float, float], weight: float) -> None:
        if x < 0 or x >= self.width or y < 0 or y >= self.height:
            return
        index = (y * self.width + x) * 4
        values = self.values
        for channel in range(3):
            updated = values[index + channel] + error[channel] * weight
            if self.clamp:
                updated = min(ERROR_CEILING, max(ERROR_FLOOR, updated))
            values[index + channel] = updated

    def diffuse(
        self,
        x: int,
        y: int,
        error: Tuple[float, float, float],
        weights: Sequence[Tuple[int, int, float]],
    ) -> None:
        for dx, dy, weight in weights:
            self.add(x + dx, y + dy, error, weight)


def error_diffusion(
    image: ImageBuffer,
    palette: Sequence[Color],
    kernel: DiffusionKernel,
    metric: ColorMetric = ColorMetric.PERCEPTUAL_WEIGHTED,
    serpentine: bool = True,
    error_clamping: bool = True,
) -> ImageBuffer:
    """Quantize ``image`` to ``palette`` by diffusing error through ``kernel``.

    Rows are scanned top to bottom. With ``serpentine`` odd rows run right
    to left and the kernel is mirrored for them. Every output RGB triple is
    a palette entry; alpha is copied from the input.
    """

    if not palette:
        raise EmptyPalette("Palette is empty; cannot determine the closest color")

    width, height = image.width, image.height
    accumulator = ErrorAccumulator(image, error_clamping)
    output = bytearray(image.data)
    forward = tuple(kernel.weights())
    backward = kernel.mirrored()
    nearest: Dict[RGB, Color] = {}

    for y in range(height):
        reverse = serpentine and y % 2 == 1
        columns = range(width - 1, -1, -1) if reverse else range(width)
        weights = backward if reverse else forward
        for x in columns:
            current = accumulator.current_color(x, y)
            quantized = nearest.get(current)
            if quantized is None:
                quantized = nearest_palette_color(current, palette, metric)
                nearest[current] = quantized

            index = (y * width + x) * 4
            output[index] = quantized[0]
            output[index + 1] = quantized[1]
            output[index + 2] = quantized[2]

            error = (
                current[0] - quantized[0],
                current[1] - quantized[1],
                current[2] - quantized[2],
            )
            if error != (0, 0, 0):
                accumulator.diffuse(x, y, error, weights)

    return ImageBuffer(bytes(output), width, height)
