from eink_dither.buffer import ImageBuffer


def make_buffer(width, height, rgba):
    return ImageBuffer(bytes(rgba) * (width * height), width, height)


def gradient_buffer(width, height, alpha=255):
    data = bytearray()
    for y in range(height):
        for x in range(width):
            data += bytes(
                (
                    (x * 255) // max(1, width - 1),
                    (y * 255) // max(1, height - 1),
                    ((x + y) * 127) // max(1, width + height - 2),
                    alpha,
                )
            )
    return ImageBuffer(bytes(data), width, height)


def rgb_pixels(buffer):
    return [
        buffer.pixel(x, y)[:3]
        for y in range(buffer.height)
        for x in range(buffer.width)
    ]


def alpha_channel(buffer):
    return buffer.data[3::4]
