from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

from ..buffer import Color, ImageBuffer, Palette
from ..errors import EmptyPalette, InvalidBufferShape

LOGGER = logging.getLogger("eink-dither.optimize")

MAX_SAMPLES = 10_000

Sample = Tuple[int, int, int]


def _squared_distance(a: Sample, b: Sample) -> int:
    dr = a[0] - b[0]
    dg = a[1] - b[1]
    db = a[2] - b[2]
    return dr * dr + dg * dg + db * db


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def sample_pixels(image: ImageBuffer) -> List[Sample]:
    """Take every n-th pixel so that roughly ``MAX_SAMPLES`` remain."""

    rate = max(1, image.pixel_count // MAX_SAMPLES)
    data = image.data
    return [(data[i], data[i + 1], data[i + 2]) for i in range(0, len(data), 4 * rate)]


def seed_centroids(samples: List[Sample], k: int, rng: random.Random) -> List[Sample]:
    """k-means++ seeding: roulette-wheel selection weighted by squared distance."""

    centroids = [samples[rng.randrange(len(samples))]]
    while len(centroids) < k:
        distances = [min(_squared_distance(pixel, centroid) for centroid in centroids) for pixel in samples]
        remaining = rng.random() * sum(distances)
        chosen = samples[-1]
        for pixel, distance in zip(samples, distances):
            remaining -= distance
            if remaining <= 0:
                chosen = pixel
                break
        centroids.append(chosen)
    return centroids


def optimize_palette(
    image: ImageBuffer,
    target_colors: int,
    max_iterations: int = 20,
    rng: Optional[random.Random] = None,
) -> Palette:
    """Derive a content-adaptive palette of ``target_colors`` via k-means.

    Pixels are subsampled to at most about ``MAX_SAMPLES`` entries, seeded
    with k-means++ and refined with Lloyd's algorithm using squared RGB
    distance. Centroids are integer-rounded channel means. A cluster that
    ends up empty keeps its previous centroid, so exactly ``target_colors``
    colors are always returned (duplicates are possible for images with
    fewer distinct colors than requested).

    Pass a seeded ``random.Random`` as ``rng`` for reproducible palettes.
    """

    if target_colors < 1:
        raise EmptyPalette("Cannot optimize a palette to zero colors")
    image.validate()
    if image.pixel_count == 0:
        raise InvalidBufferShape("Cannot optimize a palette for an image with no pixels")

    rng = rng or random.Random()
    samples = sample_pixels(image)
    centroids = seed_centroids(samples, target_colors, rng)

    for iteration in range(1, max_iterations + 1):
        sums = [[0, 0, 0, 0] for _ in centroids]
        for pixel in samples:
            best_index = 0
            best_distance = None
            for index, centroid in enumerate(centroids):
                distance = _squared_distance(pixel, centroid)
                if best_distance is None or distance < best_distance:
                    best_distance = distance
                    best_index = index
            acc = sums[best_index]
            acc[0] += pixel[0]
            acc[1] += pixel[1]
            acc[2] += pixel[2]
            acc[3] += 1

        changed = False
        for index, (r_sum, g_sum, b_sum, count) in enumerate(sums):
            if not count:
                continue
            updated = (
                _round_half_up(r_sum / count),
                _round_half_up(g_sum / count),
                _round_half_up(b_sum / count),
            )
            if updated != centroids[index]:
                centroids[index] = updated
                changed = True

        if not changed:
            LOGGER.debug("k-means converged after %d iterations", iteration)
            break
    else:
        LOGGER.debug("k-means stopped at the iteration limit (%d)", max_iterations)

    return tuple(Color(*centroid) for centroid in centroids)
