"""Exceptions raised by the dithering engine."""


class DitherError(Exception):
    """Base class for every error raised by the engine."""


class InvalidBufferShape(DitherError, ValueError):
    """Pixel data length does not match ``width * height * 4``."""


class EmptyPalette(DitherError, ValueError):
    """A palette with no colors was supplied."""


class InvalidConfig(DitherError, ValueError):
    """A configuration value is out of range or unrecognised."""
