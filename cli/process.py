"""Process command: run the processing pipeline on a single image."""

from __future__ import annotations

import argparse
import dataclasses
import logging
from typing import Any

from processing import ProcessConfig, run_pipeline
from processing.config import COMBINE_POLICIES, CONTRAST_MODES, THRESHOLD_METHODS
from processing.kernels import ConvolutionType
from raster.codec import load_image, save_image
from .recipe import Recipe, load_recipe

logger = logging.getLogger(__name__)


def add_pipeline_arguments(parser: argparse.ArgumentParser) -> None:
    """Options that override single ProcessConfig fields.

    Everything defaults to None so a recipe value is only replaced when the
    option is actually given.
    """
    parser.add_argument(
        "--recipe",
        metavar="FILE",
        help="YAML recipe to start from (options below override it)",
    )
    parser.add_argument(
        "--filter",
        dest="rgb_filter",
        metavar="RRGGBB",
        help="AND color pixels with this RGB mask, e.g. ff0000 keeps red",
    )
    parser.add_argument(
        "--grayscale",
        action="store_true",
        default=None,
        help="Convert color images to 8-bit gray first",
    )
    parser.add_argument(
        "--kernel",
        dest="kernels",
        action="append",
        choices=[t.value for t in ConvolutionType],
        metavar="NAME",
        help="Convolution kernel to apply; repeat for several (see 'rasterkit kernels')",
    )
    parser.add_argument(
        "--combine",
        action="store_true",
        default=None,
        help="Apply every kernel to the source and add the results instead of chaining",
    )
    parser.add_argument(
        "--policy",
        dest="combine_policy",
        choices=COMBINE_POLICIES,
        help="How --combine adds kernel results (default: masked)",
    )
    parser.add_argument(
        "--contrast",
        dest="contrast_mode",
        choices=CONTRAST_MODES,
        help="Contrast correction to apply",
    )
    parser.add_argument(
        "--stretch",
        nargs=2,
        type=int,
        metavar=("MIN", "MAX"),
        help="Destination range for --contrast stretch (default: 0 255)",
    )
    parser.add_argument(
        "--threshold",
        dest="threshold_method",
        choices=THRESHOLD_METHODS,
        help="Binarization method",
    )
    parser.add_argument(
        "--threshold-value",
        type=int,
        metavar="N",
        help="Level for --threshold fixed (default: 128)",
    )
    parser.add_argument(
        "--zones",
        nargs=2,
        type=int,
        metavar=("H", "V"),
        help="Zone grid for localized and chow_kaneko thresholds (default: 3 3)",
    )
    parser.add_argument(
        "--negative",
        action="store_true",
        default=None,
        help="Invert the result",
    )


def config_from_args(args: argparse.Namespace) -> ProcessConfig:
    """Build the ProcessConfig for a command from its recipe and options.

    Raises:
        OSError: If the recipe file cannot be read.
        ValueError: If the recipe or an option value is invalid.
    """
    base = load_recipe(args.recipe).to_config() if args.recipe else ProcessConfig()

    overrides: dict[str, Any] = {}
    if args.rgb_filter is not None:
        overrides["rgb_filter"] = Recipe(rgb_filter=args.rgb_filter).rgb_filter
    for name in ("grayscale", "combine_policy", "contrast_mode",
                 "threshold_method", "threshold_value", "negative"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.kernels:
        overrides["kernels"] = tuple(args.kernels)
    if args.combine:
        overrides["kernel_mode"] = "combine"
    if args.stretch is not None:
        overrides["stretch_min"], overrides["stretch_max"] = args.stretch
    if args.zones is not None:
        overrides["horizontal_zones"], overrides["vertical_zones"] = args.zones

    config = dataclasses.replace(base, **overrides)
    config.validate()
    return config


def add_process_subparser(subparsers: argparse._SubParsersAction) -> None:
    process_parser = subparsers.add_parser(
        "process",
        help="Run the processing pipeline on one image",
    )
    process_parser.add_argument("input", help="Image file to read")
    process_parser.add_argument(
        "output",
        help="Image file to write; the container follows the suffix",
    )
    add_pipeline_arguments(process_parser)
    process_parser.add_argument(
        "--artifacts",
        metavar="DIR",
        help="Also save every intermediate step as PNG in DIR",
    )
    process_parser.set_defaults(_cmd=cmd_process)


def cmd_process(args: argparse.Namespace) -> int:
    try:
        config = config_from_args(args)
        image = load_image(args.input)
        result = run_pipeline(image, config, artifact_dir=args.artifacts)
        save_image(result.image, args.output)
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Processed %s -> %s", args.input, args.output)
    for step in result.steps.steps:
        logger.info("  %-28s %s", step.name, step.metadata or "")
    for name, path in result.artifact_paths.items():
        logger.info("  artifact %-19s %s", name, path)
    return 0
