from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from ascii_image_converter.errors import ImageDecodeError


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded RGBA pixels, row-major, shape (height, width, 4) uint8."""

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Pixel array of shape {self.pixels.shape} does not match {self.width}x{self.height} RGBA"
            )
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Pixel array must be uint8, got {self.pixels.dtype}")
        view = self.pixels.view()
        view.flags.writeable = False
        object.__setattr__(self, "pixels", view)

    @classmethod
    def from_image(cls, image: Image.Image | str | Path) -> "PixelBuffer":
        if not isinstance(image, Image.Image):
            try:
                image = Image.open(image)
            except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
                raise ImageDecodeError(f"Unable to decode {image}: {e}") from e
        # Animated images contribute their first frame only
        image.seek(0)
        try:
            rgba = image.convert("RGBA")
        except OSError as e:
            raise ImageDecodeError(f"Unable to decode image: {e}") from e
        pixels = np.array(rgba, dtype=np.uint8)
        return cls(width=rgba.width, height=rgba.height, pixels=pixels)

    @classmethod
    def from_rgba(cls, rows: list[list[tuple[int, int, int, int]]]) -> "PixelBuffer":
        """Build a buffer from nested (r, g, b, a) tuples, top row first."""
        pixels = np.array(rows, dtype=np.uint8)
        if pixels.ndim != 3:
            raise ValueError("Rows must be a non-empty rectangle of RGBA tuples")
        return cls(width=pixels.shape[1], height=pixels.shape[0], pixels=pixels)


@dataclass(frozen=True)
class GridSpec:
    """Requested output size in characters; None on an axis means derive it."""

    width: int | None = None
    height: int | None = None
    complex: bool = False
    colour: bool = False

    @classmethod
    def derive(cls, complex: bool = False, colour: bool = False) -> "GridSpec":
        return cls(width=None, height=None, complex=complex, colour=colour)

    @property
    def explicit(self) -> bool:
        return self.width is not None and self.height is not None
