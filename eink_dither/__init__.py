"""Palette reduction and error-diffusion dithering for e-ink panels."""

from .buffer import Color, ImageBuffer, Palette, parse_palette
from .config import (
    BW_PALETTE,
    COLOR_PALETTE_6,
    SETTINGS,
    Algorithm,
    ColorMetric,
    DitherConfig,
    configure_logging,
)
from .errors import DitherError, EmptyPalette, InvalidBufferShape, InvalidConfig
from .processing import dither, dither_image, optimize_palette
from . import processing

__version__ = "0.4.0"

__all__ = [
    "__version__",
    "Color",
    "ImageBuffer",
    "Palette",
    "parse_palette",
    "BW_PALETTE",
    "COLOR_PALETTE_6",
    "SETTINGS",
    "Algorithm",
    "ColorMetric",
    "DitherConfig",
    "configure_logging",
    "DitherError",
    "EmptyPalette",
    "InvalidBufferShape",
    "InvalidConfig",
    "dither",
    "dither_image",
    "optimize_palette",
    "processing",
]
