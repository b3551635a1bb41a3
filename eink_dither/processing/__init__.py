"""Color quantization and error-diffusion components."""

from .colorspace import luminance, rgb_to_lab
from .dither import (
    ATKINSON,
    FLOYD_STEINBERG,
    SIERRA,
    SIERRA_TWO_ROW,
    STUCKI,
    DiffusionKernel,
    ErrorAccumulator,
    error_diffusion,
    kernel_for,
)
from .enhance import apply_gamma, enhance_local_contrast, gamma_lut
from .optimize import optimize_palette
from .palette import (
    color_distance,
    delta_e_distance,
    euclidean_distance,
    manhattan_distance,
    nearest_palette_color,
    nearest_palette_index,
    perceptual_weighted_distance,
    quantize_nearest,
)
from .pipeline import dither, dither_image

__all__ = [
    "luminance",
    "rgb_to_lab",
    "ATKINSON",
    "FLOYD_STEINBERG",
    "SIERRA",
    "SIERRA_TWO_ROW",
    "STUCKI",
    "DiffusionKernel",
    "ErrorAccumulator",
    "error_diffusion",
    "kernel_for",
    "apply_gamma",
    "enhance_local_contrast",
    "gamma_lut",
    "optimize_palette",
    "color_distance",
    "delta_e_distance",
    "euclidean_distance",
    "manhattan_distance",
    "nearest_palette_color",
    "nearest_palette_index",
    "perceptual_weighted_distance",
    "quantize_nearest",
    "dither",
    "dither_image",
]
