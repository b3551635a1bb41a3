from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple

from PIL import Image

from .errors import InvalidBufferShape, InvalidConfig

_HEX_DIGITS = "0123456789abcdefABCDEF"


class Color(NamedTuple):
    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        """Parse ``#rrggbb``, ``rrggbb`` or ``r,g,b`` into a color."""

        text = text.strip()
        if text.startswith("#"):
            text = text[1:]
        if "," in text:
            parts = [part.strip() for part in text.split(",")]
            base = 10
        else:
            parts = [text[i : i + 2] for i in range(0, len(text), 2)]
            base = 16
        if len(parts) != 3:
            raise InvalidConfig(f"Color must have exactly three components: {text!r}")
        values = []
        for part in parts:
            if base == 16 and not all(c in _HEX_DIGITS for c in part):
                raise InvalidConfig(f"Invalid color component: {part}")
            try:
                values.append(int(part, base))
            except ValueError as exc:
                raise InvalidConfig(f"Invalid color component: {part}") from exc
        if any(not (0 <= value <= 255) for value in values):
            raise InvalidConfig("Color components must be between 0 and 255")
        return cls(*values)


Palette = Tuple[Color, ...]


def parse_palette(text: str) -> Palette:
    """Build a palette from colors separated by ``;`` or whitespace."""

    chunks = [chunk for chunk in text.replace(";", " ").split() if chunk]
    return tuple(Color.from_hex(chunk) for chunk in chunks)


def as_palette(colors: Sequence[Sequence[int]]) -> Palette:
    palette = tuple(Color(int(c[0]), int(c[1]), int(c[2])) for c in colors)
    for color in palette:
        if any(not (0 <= channel <= 255) for channel in color):
            raise InvalidConfig(f"Palette color {tuple(color)} has a channel outside 0..255")
    return palette


@dataclass(frozen=True)
class ImageBuffer:
    """An RGBA pixel buffer, four bytes per pixel in row-major order."""

    data: bytes
    width: int
    height: int

    def validate(self) -> None:
        if self.width < 0 or self.height < 0:
            raise InvalidBufferShape(f"Negative dimensions: {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise InvalidBufferShape(
                f"Buffer holds {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        index = (y * self.width + x) * 4
        r, g, b, a = self.data[index : index + 4]
        return r, g, b, a

    @classmethod
    def from_image(cls, img: Image.Image) -> "ImageBuffer":
        rgba = img.convert("RGBA")
        width, height = rgba.size
        return cls(rgba.tobytes(), width, height)

    def to_image(self) -> Image.Image:
        self.validate()
        return Image.frombytes("RGBA", (self.width, self.height), bytes(self.data))
