import numpy as np
import pytest
from PIL import Image

from ascii_image_converter.charsets import COMPLEX, SIMPLE, map_brightness
from ascii_image_converter.converter import convert, image_to_ascii, save_lines
from ascii_image_converter.engine import assemble_lines
from ascii_image_converter.errors import ImageDecodeError, InvalidDimensions
from ascii_image_converter.model import GridSpec, PixelBuffer
from ascii_image_converter.sampling import TransparencyPolicy, luma


def test_solid_black_maps_to_darkest(make_buffer):
    buffer = make_buffer(2, 2, (0, 0, 0, 255))
    lines = assemble_lines(convert(buffer, GridSpec(width=2, height=2)))
    assert lines == [SIMPLE[0] * 2, SIMPLE[0] * 2]


def test_solid_white_maps_to_brightest(make_buffer):
    buffer = make_buffer(30, 40, (255, 255, 255, 255))
    lines = assemble_lines(convert(buffer, GridSpec(width=3, height=2, complex=True)))
    assert lines == [COMPLEX[-1] * 3] * 2


def test_left_to_right_column_order(split_image):
    buffer = PixelBuffer.from_image(split_image)
    lines = assemble_lines(convert(buffer, GridSpec(width=2, height=1)))
    assert lines == [SIMPLE[-1] + SIMPLE[0]]


def test_zero_width_fails(make_buffer):
    with pytest.raises(InvalidDimensions):
        convert(make_buffer(10, 10), GridSpec(width=0, height=5))


def test_grid_finer_than_pixels_fails(make_buffer):
    with pytest.raises(InvalidDimensions):
        convert(make_buffer(10, 10), GridSpec(width=5, height=11))


@pytest.mark.parametrize("width,height", [(1, 1), (5, 3), (37, 23), (10, 20)])
def test_output_dimensions(random_buffer, width, height):
    lines = assemble_lines(convert(random_buffer, GridSpec(width=width, height=height)))
    assert len(lines) == height
    assert all(len(line) == width for line in lines)


def test_conversion_is_repeatable(random_buffer):
    spec = GridSpec(width=9, height=4, complex=True, colour=True)
    first = convert(random_buffer, spec)
    second = convert(random_buffer, spec)
    assert assemble_lines(first) == assemble_lines(second)
    np.testing.assert_array_equal(first.colours, second.colours)


def test_single_character_uses_whole_image_mean(random_buffer):
    lines = assemble_lines(convert(random_buffer, GridSpec(width=1, height=1)))
    mean = int(luma(random_buffer.pixels[..., :3]).sum()) // (random_buffer.width * random_buffer.height)
    assert lines == [map_brightness(mean, SIMPLE)]


def test_brighter_cells_get_later_glyphs():
    levels = list(range(0, 256, 5))
    rows = [[(v, v, v, 255) for v in levels]]
    buffer = PixelBuffer.from_rgba(rows)
    (line,) = assemble_lines(convert(buffer, GridSpec(width=len(levels), height=1, complex=True)))
    indices = [COMPLEX.index(char) for char in line]
    assert indices == sorted(indices)


def test_colour_carried_per_character(split_image):
    buffer = PixelBuffer.from_image(split_image)
    grid = convert(buffer, GridSpec(width=2, height=1, colour=True))
    assert grid.colours.shape == (1, 2, 3)
    (row,) = list(grid.cells())
    assert row == [(SIMPLE[-1], (255, 255, 255)), (SIMPLE[0], (0, 0, 0))]


def test_no_colour_by_default(split_image):
    grid = convert(PixelBuffer.from_image(split_image), GridSpec(width=2, height=1))
    assert grid.colours is None


def test_derived_size_uses_terminal(make_buffer):
    grid = convert(make_buffer(200, 100), GridSpec.derive(), terminal_size=(80, 24))
    assert (grid.cols, grid.rows) == (80, 20)


def test_transparency_policy_applied():
    buffer = PixelBuffer.from_rgba([[(255, 255, 255, 0)]])
    opaque = convert(buffer, GridSpec(width=1, height=1))
    black = convert(buffer, GridSpec(width=1, height=1), transparency=TransparencyPolicy.BLACK)
    assert assemble_lines(opaque) == [SIMPLE[-1]]
    assert assemble_lines(black) == [SIMPLE[0]]


def test_image_to_ascii_accepts_file_path(tmp_path):
    path = tmp_path / "test.png"
    Image.new("L", (20, 20), 255).save(path)
    assert image_to_ascii(path, GridSpec(width=4, height=2)) == [SIMPLE[-1] * 4] * 2


def test_image_to_ascii_colour_escapes():
    img = Image.new("RGB", (20, 20), (255, 0, 0))
    lines = image_to_ascii(img, GridSpec(width=2, height=2, colour=True))
    assert len(lines) == 2
    assert all("\033[38;2;255;0;0m" in line for line in lines)
    assert all(line.endswith("\033[0m") for line in lines)


def test_image_to_ascii_plain_has_no_escapes():
    img = Image.new("RGB", (20, 20), (255, 0, 0))
    lines = image_to_ascii(img, GridSpec(width=2, height=2))
    assert all("\033" not in line for line in lines)


def test_image_to_ascii_rejects_non_image(tmp_path):
    path = tmp_path / "not-an-image.png"
    path.write_text("hello")
    with pytest.raises(ImageDecodeError):
        image_to_ascii(path, GridSpec(width=1, height=1))


def test_save_lines(tmp_path):
    path = save_lines(["ab", "cd"], tmp_path / "out.txt")
    assert path.read_text(encoding="utf-8") == "ab\ncd"
