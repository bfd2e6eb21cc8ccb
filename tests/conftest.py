import numpy as np
import pytest
from PIL import Image

from ascii_image_converter.model import PixelBuffer


def solid_buffer(width: int, height: int, rgba=(0, 0, 0, 255)) -> PixelBuffer:
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :] = rgba
    return PixelBuffer(width=width, height=height, pixels=pixels)


@pytest.fixture
def make_buffer():
    return solid_buffer


@pytest.fixture
def random_buffer():
    rng = np.random.default_rng(42)
    pixels = rng.integers(0, 256, size=(23, 37, 4), dtype=np.uint8)
    # Some fully transparent pixels so alpha handling is exercised
    pixels[rng.random((23, 37)) < 0.2, 3] = 0
    return PixelBuffer(width=37, height=23, pixels=pixels)


@pytest.fixture
def split_image():
    """4x2 image: left half white, right half black."""
    img = Image.new("RGB", (4, 2), (0, 0, 0))
    pixels = img.load()
    for y in range(2):
        for x in range(2):
            pixels[x, y] = (255, 255, 255)
    return img
