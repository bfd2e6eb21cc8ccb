import enum
from typing import NamedTuple

import numpy as np

from ascii_image_converter.errors import EmptyCell
from ascii_image_converter.grid import Cell
from ascii_image_converter.model import PixelBuffer

# Rec. 601 luma weights in 16-bit fixed point. They sum to 65536, so grey pixels keep
# their exact level (white stays 255, black stays 0).
LUMA_WEIGHTS = (19595, 38470, 7471)
_LUMA_SHIFT = 16
_LUMA_ROUND = 1 << (_LUMA_SHIFT - 1)


class TransparencyPolicy(enum.Enum):
    """How pixels with alpha == 0 contribute to a cell."""

    OPAQUE = "opaque"  # alpha is ignored
    BLACK = "black"  # transparent pixels count as black
    EXCLUDE = "exclude"  # transparent pixels are left out of the averages


class IntensitySample(NamedTuple):
    brightness: int
    colour: tuple[int, int, int] | None = None


def luma(rgb: np.ndarray) -> np.ndarray:
    """Per-pixel integer luma of an (..., 3) array, as uint32."""
    wr, wg, wb = LUMA_WEIGHTS
    y = rgb[..., 0].astype(np.uint32) * wr
    y += rgb[..., 1].astype(np.uint32) * wg
    y += rgb[..., 2].astype(np.uint32) * wb
    y += _LUMA_ROUND
    y >>= _LUMA_SHIFT
    return y


def _apply_transparency(
    pixels: np.ndarray, transparency: TransparencyPolicy
) -> tuple[np.ndarray, np.ndarray | None]:
    """Split RGBA pixels into uint8 RGB and a mask of pixels that count, or None if all do."""
    rgb = pixels[..., :3]
    if transparency is TransparencyPolicy.OPAQUE:
        return rgb, None

    transparent = pixels[..., 3] == 0
    if transparency is TransparencyPolicy.BLACK:
        return np.where(transparent[..., np.newaxis], np.uint8(0), rgb), None
    return rgb, ~transparent


def _band_sums(
    band: np.ndarray, xs: list[int], colour: bool, transparency: TransparencyPolicy
) -> tuple[np.ndarray, np.ndarray, np.ndarray | None]:
    """Per-cell sums over one row of cells.

    Returns:
        counts: (cols,) number of pixels that count in each cell
        luma_sums: (cols,) summed luma
        rgb_sums: (cols, 3) summed RGB, or None if colour is False
    """
    rgb, mask = _apply_transparency(band, transparency)
    y = luma(rgb)
    if mask is None:
        counts = np.diff(xs + [band.shape[1]]) * band.shape[0]
    else:
        y[~mask] = 0
        counts = np.add.reduceat(mask.sum(axis=0, dtype=np.int64), xs)

    luma_sums = np.add.reduceat(y.sum(axis=0, dtype=np.int64), xs)
    rgb_sums = None
    if colour:
        if mask is not None:
            rgb = np.where(mask[..., np.newaxis], rgb, np.uint8(0))
        rgb_sums = np.add.reduceat(rgb.sum(axis=0, dtype=np.int64), xs, axis=0)
    return counts, luma_sums, rgb_sums


def reduce_cell(
    buffer: PixelBuffer,
    cell: Cell,
    colour: bool = False,
    transparency: TransparencyPolicy = TransparencyPolicy.OPAQUE,
) -> IntensitySample:
    """Mean luma (and optionally mean RGB) of the pixels a cell covers, truncated to integers."""
    if cell.pixel_count == 0:
        raise EmptyCell(cell.row, cell.col)

    region = buffer.pixels[cell.y0 : cell.y1, cell.x0 : cell.x1]
    counts, luma_sums, rgb_sums = _band_sums(region, [0], colour, transparency)
    count = int(counts[0])
    if count == 0:
        return IntensitySample(0, (0, 0, 0) if colour else None)

    brightness = min(int(luma_sums[0]) // count, 255)
    mean_rgb = None
    if colour:
        mean_rgb = tuple(int(s) // count for s in rgb_sums[0])
    return IntensitySample(brightness, mean_rgb)


def reduce_grid(
    buffer: PixelBuffer,
    cells: list[list[Cell]],
    colour: bool = False,
    transparency: TransparencyPolicy = TransparencyPolicy.OPAQUE,
) -> tuple[np.ndarray, np.ndarray | None]:
    """Reduce every cell of a partition.

    Gives the same values as calling reduce_cell on each cell in row-major order,
    but sums a whole row of cells per pass, so scratch memory is bounded by one
    band of pixel rows rather than the whole buffer.

    Returns:
        brightness: (rows, cols) int64 array, values 0-255
        colours: (rows, cols, 3) uint8 array of mean RGB, or None if colour is False
    """
    for row in cells:
        for cell in row:
            if cell.pixel_count == 0:
                raise EmptyCell(cell.row, cell.col)

    rows, cols = len(cells), len(cells[0])
    xs = [cell.x0 for cell in cells[0]]

    brightness = np.empty((rows, cols), dtype=np.int64)
    colours = np.empty((rows, cols, 3), dtype=np.uint8) if colour else None
    for r, row in enumerate(cells):
        band = buffer.pixels[row[0].y0 : row[0].y1]
        counts, luma_sums, rgb_sums = _band_sums(band, xs, colour, transparency)
        safe_counts = np.maximum(counts, 1)
        brightness[r] = np.minimum(luma_sums // safe_counts, 255)
        if colour:
            colours[r] = rgb_sums // safe_counts[:, np.newaxis]
    return brightness, colours
