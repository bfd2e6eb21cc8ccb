import numpy as np

# Ramps run from darkest-appearing to brightest-appearing glyph on a dark terminal.
SIMPLE = " .:-=+*#%@"

# Paul Bourke's 70-level greyscale ramp, reversed so the space comes first
COMPLEX = "$@B%8&WM#*oahkbdpqwmZO0QLCJUXYzcvunxrjft/\\|()1{}[]?-_+~<>i!lI;:,\"^`'. "[::-1]


def get_ramp(complex: bool = False) -> str:
    return COMPLEX if complex else SIMPLE


def bucket_index(brightness, length: int):
    """Index of the bucket holding brightness when [0, 255] is cut into length equal buckets.

    Accepts an int or an integer array; arrays are mapped element-wise.
    """
    indices = np.clip(np.asarray(brightness, dtype=np.int64) * length // 256, 0, length - 1)
    return int(indices) if indices.ndim == 0 else indices


def map_brightness(brightness: int, ramp: str) -> str:
    return ramp[bucket_index(brightness, len(ramp))]


def map_grid(brightness: np.ndarray, ramp: str) -> list[list[str]]:
    """Vectorized map_brightness over a (rows, cols) integer array."""
    glyphs = np.array(list(ramp))
    return glyphs[bucket_index(brightness, len(ramp))].tolist()
