from __future__ import annotations

import logging
import random
import time
from typing import Optional, Sequence

from PIL import Image

from ..buffer import Color, ImageBuffer, as_palette
from ..config import SETTINGS, DitherConfig
from ..errors import DitherError, EmptyPalette
from .dither import error_diffusion, kernel_for
from .enhance import apply_gamma, enhance_local_contrast
from .optimize import optimize_palette

LOGGER = logging.getLogger("eink-dither.pipeline")


def dither(
    image: ImageBuffer,
    palette: Sequence[Color],
    config: DitherConfig = SETTINGS,
    rng: Optional[random.Random] = None,
) -> ImageBuffer:
    """Reduce ``image`` to ``palette`` with the configured error diffusion.

    Steps: validate inputs, gamma LUT, local contrast (when the strength is
    above zero), optional k-means palette replacement, then the selected
    kernel. Any error aborts the call before a buffer is produced.

    ``rng`` feeds the palette optimizer; when omitted a ``random.Random``
    seeded with ``config.seed`` is used.
    """

    try:
        image.validate()
        if not palette:
            raise EmptyPalette("Palette is empty; cannot determine the closest color")
        colors = as_palette(palette)
        config.validate()
    except DitherError as exc:
        LOGGER.warning("Rejected dither request: %s", exc)
        raise

    if image.pixel_count == 0:
        return ImageBuffer(bytes(image.data), image.width, image.height)

    started = time.perf_counter()
    LOGGER.debug(
        "Dithering %dx%d with %s (metric=%s, gamma=%.3f, contrast=%.2f, serpentine=%s, clamping=%s)",
        image.width,
        image.height,
        config.algorithm.value,
        config.metric.value,
        config.gamma,
        config.contrast_enhancement,
        config.serpentine,
        config.error_clamping,
    )

    processed = apply_gamma(image, config.gamma)
    if config.contrast_enhancement > 0:
        processed = enhance_local_contrast(processed, config.contrast_enhancement)

    if config.optimize_palette:
        colors = optimize_palette(
            processed,
            len(colors),
            max_iterations=config.max_iterations,
            rng=rng or random.Random(config.seed),
        )
        LOGGER.debug("Optimized palette: %s", ", ".join("#%02x%02x%02x" % color for color in colors))

    result = error_diffusion(
        processed,
        colors,
        kernel_for(config.algorithm),
        metric=config.metric,
        serpentine=config.serpentine,
        error_clamping=config.error_clamping,
    )
    LOGGER.debug("Dithered in %.1f ms", (time.perf_counter() - started) * 1000.0)
    return result


def dither_image(
    img: Image.Image,
    palette: Sequence[Color],
    config: DitherConfig = SETTINGS,
    rng: Optional[random.Random] = None,
) -> Image.Image:
    """Pillow front end for :func:`dither`; returns an ``RGBA`` image."""

    return dither(ImageBuffer.from_image(img), palette, config, rng=rng).to_image()
