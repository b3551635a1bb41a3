import random

import pytest

from eink_dither.buffer import Color, ImageBuffer
from eink_dither.errors import EmptyPalette, InvalidBufferShape
from eink_dither.processing.optimize import MAX_SAMPLES, optimize_palette, sample_pixels, seed_centroids

from .helpers import make_buffer


def _two_tone(width=10, height=10):
    data = bytearray()
    for y in range(height):
        for x in range(width):
            data += bytes((0, 0, 0, 255)) if x < width // 2 else bytes((255, 255, 255, 255))
    return ImageBuffer(bytes(data), width, height)


def test_optimize_palette_finds_both_tones():
    palette = optimize_palette(_two_tone(), 2, rng=random.Random(7))

    assert len(palette) == 2
    assert set(palette) == {Color(0, 0, 0), Color(255, 255, 255)}


def test_optimize_palette_is_reproducible_with_seeded_rng(gradient):
    first = optimize_palette(gradient, 4, rng=random.Random(42))
    second = optimize_palette(gradient, 4, rng=random.Random(42))

    assert first == second
    assert len(first) == 4
    assert all(isinstance(color, Color) for color in first)


def test_optimize_palette_keeps_cardinality_for_flat_images():
    image = make_buffer(6, 6, (10, 20, 30, 255))

    palette = optimize_palette(image, 3, rng=random.Random(1))

    assert palette == (Color(10, 20, 30),) * 3


def test_optimize_palette_rejects_zero_colors(gradient):
    with pytest.raises(EmptyPalette):
        optimize_palette(gradient, 0)


def test_optimize_palette_rejects_empty_image():
    with pytest.raises(InvalidBufferShape):
        optimize_palette(ImageBuffer(b"", 0, 0), 2)


def test_sample_pixels_caps_sample_count():
    image = make_buffer(200, 100, (1, 2, 3, 4))

    samples = sample_pixels(image)

    assert len(samples) == MAX_SAMPLES
    assert samples[0] == (1, 2, 3)


def test_seed_centroids_prefers_distant_points():
    samples = [(0, 0, 0)] * 50 + [(255, 255, 255)]

    centroids = seed_centroids(samples, 2, random.Random(3))

    assert len(centroids) == 2
    assert set(centroids) == {(0, 0, 0), (255, 255, 255)}
