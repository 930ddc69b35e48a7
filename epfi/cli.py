"""
EPFI command line.

    epfi text PATH SIZE [-t TOLERANCE] [-m RGB|HSV|HEX]
    epfi file PATH SIZE [-t TOLERANCE] [-o OUTPUT] [-w STRIPE_WIDTH] [-h HEIGHT]
"""

import argparse
import sys
from typing import List, Optional

from epfi import __version__
from epfi.config import config
from epfi.services.colors.errors import PaletteError
from epfi.services.colors.formatting import ColorFormatting, format_palette
from epfi.services.colors.quantize import KMeansQuantizer
from epfi.services.colors.refinement import extract_palette
from epfi.services.colors.stripes import create_striped_image
from epfi.services.imaging import load_image, save_png
from epfi.utils.logging import get_logger

_RED = "\033[31m"
_RESET = "\033[0m"


def _common_arguments() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("path", help="The path to the image that will have its palette extracted")
    common.add_argument("size", type=int,
                        help="The amount of colors the palette will have. "
                             "It cannot exceed the total colors in the image")
    common.add_argument("-t", "--similarity-tolerance", dest="tolerance", type=float,
                        default=config.DEFAULT_TOLERANCE,
                        help="How different 2 colors must be to be part of the palette, bigger "
                             "numbers are more restrictive. Ranges from 0 to 441.67")
    common.add_argument("--strict", action="store_true", default=config.STRICT_SIZE,
                        help="Fail instead of shrinking the palette when the image has fewer colors")
    common.add_argument("--quantize", action="store_true",
                        help="Pre-reduce candidate colors with k-means")
    common.add_argument("-v", "--verbose", action="store_true", help="Log refinement progress")
    return common


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="epfi", description="EPFI - Extract palette From Image")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)
    common = _common_arguments()

    text = commands.add_parser("text", parents=[common],
                               help="Outputs the color palette as a set of color codes")
    text.add_argument("-m", "--formatting-mode", dest="formatting",
                      type=str.upper, choices=[m.value for m in ColorFormatting],
                      default=ColorFormatting.RGB.value,
                      help="Specifies in which format the color codes will be printed")

    # -h is the swatch height here, so help moves to --help only
    image = commands.add_parser("file", parents=[common], add_help=False,
                                help=f"Outputs the color palette to a {config.SAVE_EXT} file")
    image.add_argument("--help", action="help", help="show this help message and exit")
    image.add_argument("-o", "--output-path", dest="output", default=f"output{config.SAVE_EXT}",
                       help="Specifies where the palette will be saved")
    image.add_argument("-w", "--stripe-width", dest="stripe_width", type=int,
                       default=config.STRIPE_WIDTH,
                       help="Specifies the pixel width of each of the vertical color bands")
    image.add_argument("-h", "--height", dest="height", type=int, default=config.STRIPE_HEIGHT,
                       help="Specifies the pixel height of the image the palette will be saved to")
    return parser


def _palette(args: argparse.Namespace):
    buffer = load_image(args.path)
    quantizer = KMeansQuantizer() if args.quantize else None
    return extract_palette(buffer, args.size, args.tolerance, quantizer=quantizer, strict=args.strict)


def run_text(args: argparse.Namespace) -> int:
    result = _palette(args)
    for line in format_palette(result.colors, ColorFormatting(args.formatting)):
        print(line)
    return 0


def run_file(args: argparse.Namespace) -> int:
    result = _palette(args)
    striped = create_striped_image(args.stripe_width, args.height, result.colors)
    target = save_png(striped, args.output)
    print(target)
    return 0


def fail(message: str) -> int:
    """Report a failure on stderr in red; returns the process exit code."""
    print(f"{_RED}{message}{_RESET}", file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    get_logger("DEBUG" if args.verbose else "WARNING")

    try:
        if args.command == "text":
            return run_text(args)
        return run_file(args)
    except PaletteError as e:
        return fail(e.message)
    except (OSError, ValueError, RuntimeError) as e:
        return fail(str(e))


if __name__ == "__main__":
    sys.exit(main())
