import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from ascii_image_converter.config import Settings, find_config_file, load_settings, parse_dimensions
from ascii_image_converter.converter import convert, save_lines
from ascii_image_converter.engine import assemble_lines, format_colour
from ascii_image_converter.errors import ConfigError, ConversionError
from ascii_image_converter.model import GridSpec, PixelBuffer
from ascii_image_converter.sampling import TransparencyPolicy

logger = logging.getLogger(__name__)


def _dimensions(value: str) -> tuple[int, int]:
    try:
        return parse_dimensions(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e).removeprefix("dimensions: ")) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ascii-image-converter",
        description="Converts images into ascii format and prints them onto the terminal window",
    )
    parser.add_argument("image", help="Path to input image")
    parser.add_argument(
        "--config", default=None, help="Config file (default is $HOME/.ascii-image-converter.yaml)"
    )
    parser.add_argument(
        "-c",
        "--complex",
        action="store_true",
        default=None,
        help="Print ascii characters in a larger range, may result in higher quality",
    )
    parser.add_argument(
        "-d",
        "--dimensions",
        type=_dimensions,
        default=None,
        metavar="W,H",
        help="Width and height of the ascii art in characters, e.g. 100,30 (default: terminal size)",
    )
    parser.add_argument(
        "-C", "--color", dest="colour", action="store_true", default=None, help="Enable truecolor ANSI output"
    )
    parser.add_argument(
        "-S",
        "--save",
        action="store_true",
        default=None,
        help="Save the ascii text to a file (default: ascii-image.txt in the current directory)",
    )
    parser.add_argument("-o", "--output", default=None, help="File to save to; implies --save")
    parser.add_argument(
        "--aspect",
        type=float,
        default=None,
        help="Character cell width/height used to derive dimensions (default: 0.5)",
    )
    parser.add_argument(
        "--transparency",
        choices=[p.value for p in TransparencyPolicy],
        default=None,
        help="How fully transparent pixels are treated (default: opaque)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    return parser


def apply_args(settings: Settings, args: argparse.Namespace) -> Settings:
    """Override settings with any flags given on the command line."""
    overrides = {}
    for key in ("complex", "dimensions", "colour", "save"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value
    if args.output is not None:
        overrides["save"] = True
        overrides["save_path"] = args.output
    if args.aspect is not None:
        overrides["char_aspect"] = args.aspect
    if args.transparency is not None:
        overrides["transparency"] = TransparencyPolicy(args.transparency)
    return replace(settings, **overrides)


def run(image_path: Path, settings: Settings) -> list[str]:
    width, height = settings.dimensions if settings.dimensions is not None else (None, None)
    spec = GridSpec(width=width, height=height, complex=settings.complex, colour=settings.colour)
    buffer = PixelBuffer.from_image(image_path)
    grid = convert(buffer, spec, char_aspect=settings.char_aspect, transparency=settings.transparency)

    lines = assemble_lines(grid)
    print("\n".join(format_colour(grid) if settings.colour else lines))

    if settings.save:
        save_lines(lines, settings.save_path)
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.aspect is not None and args.aspect <= 0:
        parser.error("--aspect must be positive")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"File not found: {image_path}", file=sys.stderr)
        return 1

    try:
        config_path = args.config if args.config is not None else find_config_file()
        settings = apply_args(load_settings(config_path), args)
        if config_path is not None:
            # stdout carries only the art
            print(f"Using config file: {config_path}", file=sys.stderr)
        run(image_path, settings)
    except (ConversionError, OSError) as e:
        logger.debug("Conversion failed", exc_info=True)
        print(e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
