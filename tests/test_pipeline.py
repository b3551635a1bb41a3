import random

import pytest
from PIL import Image

from eink_dither.buffer import Color, ImageBuffer
from eink_dither.config import BW_PALETTE, COLOR_PALETTE_6, Algorithm, DitherConfig
from eink_dither.errors import EmptyPalette, InvalidBufferShape, InvalidConfig
from eink_dither.processing.enhance import apply_gamma, enhance_local_contrast
from eink_dither.processing.optimize import optimize_palette
from eink_dither.processing.pipeline import dither, dither_image

from .helpers import alpha_channel, gradient_buffer, make_buffer, rgb_pixels


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_dither_preserves_shape_alpha_and_palette(algorithm):
    image = gradient_buffer(10, 8, alpha=140)
    config = DitherConfig(algorithm=algorithm)

    result = dither(image, COLOR_PALETTE_6, config)

    assert (result.width, result.height) == (image.width, image.height)
    assert len(result.data) == len(image.data)
    assert alpha_channel(result) == alpha_channel(image)
    assert set(rgb_pixels(result)) <= set(COLOR_PALETTE_6)


def test_dither_with_perceptual_space_stays_in_palette(gradient):
    config = DitherConfig(use_perceptual_space=True, algorithm="sierra-two-row")

    result = dither(gradient, COLOR_PALETTE_6, config)

    assert set(rgb_pixels(result)) <= set(COLOR_PALETTE_6)


def test_dither_is_deterministic_without_palette_optimization(gradient):
    config = DitherConfig(algorithm=Algorithm.FLOYD_STEINBERG, contrast_enhancement=0.3)

    assert dither(gradient, COLOR_PALETTE_6, config).data == dither(gradient, COLOR_PALETTE_6, config).data


def test_dither_single_black_pixel():
    image = make_buffer(1, 1, (0, 0, 0, 255))

    result = dither(image, [Color(255, 255, 255), Color(0, 0, 0)], DitherConfig())

    assert result.data == bytes((0, 0, 0, 255))


def test_dither_without_preprocessing_matches_literal_bytes():
    image = make_buffer(2, 1, (128, 128, 128, 255))
    config = DitherConfig(
        algorithm=Algorithm.FLOYD_STEINBERG,
        color_distance="euclidean",
        serpentine=False,
        gamma=1.0,
        contrast_enhancement=0.0,
    )

    result = dither(image, BW_PALETTE, config)

    assert result.data == bytes((255, 255, 255, 255, 0, 0, 0, 255))


def test_dither_uses_optimized_palette_when_requested(gradient):
    config = DitherConfig(optimize_palette=True, seed=11, contrast_enhancement=0.2)

    result = dither(gradient, COLOR_PALETTE_6[:4], config)

    processed = enhance_local_contrast(apply_gamma(gradient, config.gamma), config.contrast_enhancement)
    expected_palette = optimize_palette(processed, 4, rng=random.Random(11))
    assert set(rgb_pixels(result)) <= set(expected_palette)


def test_dither_accepts_injected_rng(gradient):
    config = DitherConfig(optimize_palette=True)

    first = dither(gradient, BW_PALETTE, config, rng=random.Random(5))
    second = dither(gradient, BW_PALETTE, config, rng=random.Random(5))

    assert first.data == second.data


def test_dither_rejects_bad_buffer_shape():
    image = ImageBuffer(bytes(7), 2, 1)

    with pytest.raises(InvalidBufferShape):
        dither(image, BW_PALETTE, DitherConfig())


@pytest.mark.parametrize("optimize", [False, True])
def test_dither_rejects_empty_palette(optimize, gradient):
    with pytest.raises(EmptyPalette):
        dither(gradient, [], DitherConfig(optimize_palette=optimize))


@pytest.mark.parametrize(
    "overrides",
    [{"gamma": 0.0}, {"gamma": -1.0}, {"contrast_enhancement": 1.5}, {"contrast_enhancement": -0.1}],
)
def test_dither_rejects_out_of_range_config(overrides, gradient):
    with pytest.raises(InvalidConfig):
        dither(gradient, BW_PALETTE, DitherConfig(**overrides))


@pytest.mark.parametrize("bad_color", [(300, 0, 0), (0, -1, 0)])
def test_dither_rejects_palette_colors_outside_byte_range(bad_color, gradient):
    with pytest.raises(InvalidConfig):
        dither(gradient, [Color(0, 0, 0), bad_color], DitherConfig())


def test_dither_shape_error_wins_over_palette_error():
    with pytest.raises(InvalidBufferShape):
        dither(ImageBuffer(b"\x00", 1, 1), [], DitherConfig())


def test_dither_returns_empty_buffer_for_zero_area_image():
    image = ImageBuffer(b"", 5, 0)

    assert dither(image, BW_PALETTE, DitherConfig()) == image


def test_dither_does_not_modify_input(gradient):
    before = gradient.data

    dither(gradient, BW_PALETTE, DitherConfig())

    assert gradient.data == before


def test_dither_image_round_trips_through_pillow():
    src = Image.new("RGBA", (6, 4), color=(120, 140, 200, 180))

    result = dither_image(src, COLOR_PALETTE_6, DitherConfig(algorithm="atkinson"))

    assert result.mode == "RGBA"
    assert result.size == src.size
    assert set(result.getchannel("A").getdata()) == {180}
    assert {pixel[:3] for pixel in result.getdata()} <= set(COLOR_PALETTE_6)


def test_dither_image_accepts_rgb_source():
    src = Image.new("RGB", (3, 3), color=(250, 250, 250))

    result = dither_image(src, BW_PALETTE, DitherConfig())

    assert result.getpixel((1, 1)) == (255, 255, 255, 255)
