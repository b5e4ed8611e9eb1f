#!/usr/bin/env python3
"""
Unified CLI for rasterkit pixel processing.

Usage:
    rasterkit process in.png out.png --kernel smoothing --threshold otsu
    rasterkit process in.png out.png --recipe recipe.yaml --artifacts steps/
    rasterkit batch photos/ out/ --recipe recipe.yaml
    rasterkit identify a.bmp b.jpg       # Container type from magic bytes
    rasterkit histogram in.png --otsu    # Non-empty bins and Otsu level
    rasterkit kernels --show             # Predefined convolution kernels
"""

import argparse
import logging
import sys

from logging_utils import configure_logging, add_logging_args
from cli.batch import add_batch_subparser
from cli.histogram import add_histogram_subparser
from cli.identify import add_identify_subparser
from cli.kernels import add_kernels_subparser
from cli.process import add_process_subparser

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rasterkit",
        description="rasterkit - filters, thresholds and contrast for raster images",
    )
    add_logging_args(parser)
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_process_subparser(subparsers)
    add_batch_subparser(subparsers)
    add_identify_subparser(subparsers)
    add_histogram_subparser(subparsers)
    add_kernels_subparser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.verbose, args.quiet)

    cmd = getattr(args, "_cmd", None)
    if args.command is None or cmd is None:
        parser.print_help()
        return 1
    return cmd(args)


if __name__ == "__main__":
    sys.exit(main())
