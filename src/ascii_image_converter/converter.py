import logging
from pathlib import Path

from PIL import Image

from ascii_image_converter.charsets import get_ramp, map_grid
from ascii_image_converter.engine import AsciiGrid, assemble_lines, format_colour
from ascii_image_converter.grid import CHAR_ASPECT, partition, resolve_dimensions
from ascii_image_converter.model import GridSpec, PixelBuffer
from ascii_image_converter.sampling import TransparencyPolicy, reduce_grid
from ascii_image_converter.terminal import get_terminal_size

logger = logging.getLogger(__name__)


def convert(
    buffer: PixelBuffer,
    spec: GridSpec,
    terminal_size: tuple[int, int] | None = None,
    char_aspect: float = CHAR_ASPECT,
    transparency: TransparencyPolicy = TransparencyPolicy.OPAQUE,
) -> AsciiGrid:
    """Convert decoded pixels into a grid of ramp characters.

    Either returns a complete grid or raises; nothing is returned on failure.
    """
    if terminal_size is None and not spec.explicit:
        terminal_size = get_terminal_size()
    cols, rows = resolve_dimensions(buffer.width, buffer.height, spec, terminal_size, char_aspect)
    cells = partition(buffer.width, buffer.height, cols, rows)
    brightness, colours = reduce_grid(buffer, cells, colour=spec.colour, transparency=transparency)
    ramp = get_ramp(spec.complex)
    logger.debug("Mapping %dx%d cells onto a %d-glyph ramp", cols, rows, len(ramp))
    return AsciiGrid(chars=map_grid(brightness, ramp), colours=colours)


def image_to_ascii(
    image: Image.Image | str | Path,
    spec: GridSpec,
    terminal_size: tuple[int, int] | None = None,
    char_aspect: float = CHAR_ASPECT,
    transparency: TransparencyPolicy = TransparencyPolicy.OPAQUE,
) -> list[str]:
    """Decode an image and return its text lines, ANSI-coloured when spec.colour is set."""
    buffer = PixelBuffer.from_image(image)
    grid = convert(buffer, spec, terminal_size=terminal_size, char_aspect=char_aspect, transparency=transparency)
    if spec.colour:
        return format_colour(grid)
    return assemble_lines(grid)


def save_lines(lines: list[str], path: str | Path) -> Path:
    path = Path(path)
    path.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Saved ascii art to %s", path)
    return path
