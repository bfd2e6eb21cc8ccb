import logging
from dataclasses import dataclass

from ascii_image_converter.errors import InvalidDimensions
from ascii_image_converter.model import GridSpec

logger = logging.getLogger(__name__)

# Width / height of one terminal character cell. Terminal glyphs are roughly twice
# as tall as they are wide, so derived heights are halved to keep the picture's
# proportions. Empirical; override per font with the `char_aspect` setting.
CHAR_ASPECT = 0.5


@dataclass(frozen=True)
class Cell:
    row: int
    col: int
    y0: int
    y1: int
    x0: int
    x1: int

    @property
    def pixel_count(self) -> int:
        return max(self.y1 - self.y0, 0) * max(self.x1 - self.x0, 0)


def boundaries(length: int, count: int) -> list[int]:
    """Split [0, length) into count spans of length // count; the last span takes the remainder."""
    step = length // count
    return [i * step for i in range(count)] + [length]


def validate_dimensions(pixel_width: int, pixel_height: int, cols: int, rows: int) -> None:
    if cols < 1 or rows < 1 or cols > pixel_width or rows > pixel_height:
        raise InvalidDimensions(cols, rows, pixel_width, pixel_height)


def partition(pixel_width: int, pixel_height: int, cols: int, rows: int) -> list[list[Cell]]:
    """Cover a pixel_width x pixel_height buffer with rows x cols non-overlapping cells."""
    validate_dimensions(pixel_width, pixel_height, cols, rows)
    ys = boundaries(pixel_height, rows)
    xs = boundaries(pixel_width, cols)
    return [
        [Cell(row=r, col=c, y0=ys[r], y1=ys[r + 1], x0=xs[c], x1=xs[c + 1]) for c in range(cols)]
        for r in range(rows)
    ]


def _clamp(value: int, upper: int) -> int:
    return min(max(value, 1), upper)


def resolve_dimensions(
    pixel_width: int,
    pixel_height: int,
    spec: GridSpec,
    terminal_size: tuple[int, int],
    char_aspect: float = CHAR_ASPECT,
) -> tuple[int, int]:
    """Return (cols, rows) for spec, deriving missing axes from the terminal and image aspect ratio."""
    if char_aspect <= 0:
        raise ValueError(f"char_aspect must be positive, got {char_aspect}")
    if pixel_width < 1 or pixel_height < 1:
        raise InvalidDimensions(spec.width, spec.height, pixel_width, pixel_height)

    if spec.explicit:
        validate_dimensions(pixel_width, pixel_height, spec.width, spec.height)
        return spec.width, spec.height

    # Characters per pixel row divided by characters per pixel column
    ratio = pixel_height / pixel_width * char_aspect

    if spec.width is not None:
        validate_dimensions(pixel_width, pixel_height, spec.width, 1)
        rows = _clamp(round(spec.width * ratio), pixel_height)
        cols = spec.width
    elif spec.height is not None:
        validate_dimensions(pixel_width, pixel_height, 1, spec.height)
        cols = _clamp(round(spec.height / ratio), pixel_width)
        rows = spec.height
    else:
        term_cols, term_rows = terminal_size
        cols = term_cols
        rows = round(cols * ratio)
        if rows > term_rows:
            rows = term_rows
            cols = round(rows / ratio)
        cols = _clamp(cols, pixel_width)
        rows = _clamp(rows, pixel_height)

    logger.debug("Derived %dx%d character grid for %dx%d image", cols, rows, pixel_width, pixel_height)
    return cols, rows
