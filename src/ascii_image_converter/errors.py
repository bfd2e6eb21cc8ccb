class ConversionError(Exception):
    """Base class for failures while turning an image into text."""


class InvalidDimensions(ConversionError, ValueError):
    """Requested character grid is non-positive or finer than the pixel grid."""

    def __init__(self, width, height, pixel_width: int, pixel_height: int):
        self.width = width
        self.height = height
        self.pixel_width = pixel_width
        self.pixel_height = pixel_height
        super().__init__(
            f"Cannot split a {pixel_width}x{pixel_height} image into {width}x{height} characters"
        )


class EmptyCell(ConversionError, RuntimeError):
    """A grid cell covers no pixels. Indicates a partitioning bug."""

    def __init__(self, row: int, col: int):
        self.row = row
        self.col = col
        super().__init__(f"Cell ({row}, {col}) covers no pixels")


class ImageDecodeError(ConversionError):
    """The input could not be decoded into pixels."""


class ConfigError(ConversionError):
    """Configuration file or environment holds an invalid value."""
