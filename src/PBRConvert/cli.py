"""Command-line interface for the texture converter."""

import argparse
import json
import logging
import os
import sys

from .config import ConversionConfig, parse_constant
from .converter import convert_textures
from .core import setup_logging
from .errors import InvalidConstantError

logger = logging.getLogger("pbr_convert")

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_CONVERSION_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="PBRConvert",
        description="Convert metalness/roughness PBR textures to specular/glossiness",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  PBRConvert -b rock_basecolor.png -m rock_metal.png -r rock_rough.png -o ./out
  PBRConvert -b bc.png -m m.png -r r.png -o ./out --embed-gloss
  PBRConvert -b bc.png -m m.png -r r.png --metalness-constant 0.3 --dielectric-constant 0.04
  PBRConvert -b bc.png -m m.png -r r.png --config converter.yaml
  PBRConvert --generate-config --config converter.yaml
        """
    )
    parser.add_argument("--base-color", "-b", help="Base color image")
    parser.add_argument("--metalness", "-m", help="Metalness image (grayscale)")
    parser.add_argument("--roughness", "-r", help="Roughness image (grayscale)")
    parser.add_argument("--output", "-o", help="Output directory")
    parser.add_argument("--config", "-c", help="Path to config YAML")
    parser.add_argument("--metalness-constant",
                        help="Minimum base color kept in metal diffuse (default 0.28)")
    parser.add_argument("--dielectric-constant",
                        help="Base reflectivity of non-metals (default 0.05)")
    parser.add_argument("--embed-gloss", action="store_const", const=True, default=None,
                        help="Store glossiness in the specular alpha channel "
                             "instead of writing glossiness.png")
    parser.add_argument("--generate-config", action="store_true",
                        help="Write a default config YAML and exit")
    parser.add_argument("--json", action="store_true",
                        help="Print the conversion result as JSON")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--log-level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return parser


def main(argv=None):
    """Parse CLI arguments, run one conversion and exit with its status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.generate_config:
        dest = args.config or "config.yaml"
        if os.path.isdir(dest):
            dest = os.path.join(dest, "config.yaml")
        ConversionConfig().to_yaml(dest)
        print(f"Generated default {dest}")
        return

    # Constants are checked before any file is touched.
    try:
        metalness_constant = (
            parse_constant(args.metalness_constant, "metalness_constant")
            if args.metalness_constant is not None else None
        )
        dielectric_constant = (
            parse_constant(args.dielectric_constant, "dielectric_constant")
            if args.dielectric_constant is not None else None
        )
    except InvalidConstantError as e:
        print(f"Error: {e}")
        sys.exit(EXIT_USAGE)

    missing_args = [
        flag for flag, value in (
            ("--base-color", args.base_color),
            ("--metalness", args.metalness),
            ("--roughness", args.roughness),
        ) if not value
    ]
    if missing_args:
        print(f"Error: missing required input(s): {', '.join(missing_args)}")
        sys.exit(EXIT_USAGE)

    # Ensure config warnings are visible before logging is fully configured.
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    if args.config:
        if not os.path.exists(args.config):
            print(f"Error: Config file not found: {args.config}")
            sys.exit(EXIT_USAGE)
        try:
            config = ConversionConfig.from_yaml(args.config)
        except ValueError as e:
            print(f"Error: Invalid config: {e}")
            sys.exit(EXIT_USAGE)
    else:
        config = ConversionConfig()

    try:
        config = config.with_overrides(
            metalness_constant=metalness_constant,
            dielectric_constant=dielectric_constant,
            embed_glossiness_in_alpha=args.embed_gloss,
            output_dir=args.output,
            log_level=args.log_level,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(EXIT_USAGE)

    setup_logging(config.log_level, args.log_file)
    logger.debug("Running with config: %s", config.to_dict())

    result = convert_textures(args.base_color, args.metalness, args.roughness, config)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.ok:
        for path in result.written:
            print(path)
    else:
        print(f"Error: {result.error}")

    if not result.ok:
        sys.exit(EXIT_CONVERSION_FAILED)


if __name__ == "__main__":
    main()
