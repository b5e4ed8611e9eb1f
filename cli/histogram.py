"""Histogram command: print an image's intensity histogram."""

from __future__ import annotations

import argparse
import logging

from processing.histogram import get_histogram_values, render_histogram
from processing.threshold import get_by_otsu_method
from raster.codec import load_image, write_array
from raster.edit import read_buffer

logger = logging.getLogger(__name__)


def add_histogram_subparser(subparsers: argparse._SubParsersAction) -> None:
    histogram_parser = subparsers.add_parser(
        "histogram",
        help="Print the non-empty intensity bins of an image",
    )
    histogram_parser.add_argument("file", help="Image file to read")
    histogram_parser.add_argument(
        "--otsu",
        action="store_true",
        help="Also print the Otsu threshold for the image",
    )
    histogram_parser.add_argument(
        "--plot",
        metavar="OUT",
        help="Save a bar chart of the histogram to OUT",
    )
    histogram_parser.set_defaults(_cmd=cmd_histogram)


def cmd_histogram(args: argparse.Namespace) -> int:
    try:
        buffer = read_buffer(load_image(args.file))
        histogram = get_histogram_values(buffer.packed(), buffer.pixel_depth)
        if args.plot:
            chart = render_histogram(histogram)
            write_array(chart.pixels()[:, :, 0], args.plot)
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    logger.info("%s: %dx%d %s", args.file, buffer.width, buffer.height, buffer.pixel_format.value)
    for level, count in enumerate(histogram):
        if count:
            logger.info("%3d %d", level, count)
    if args.otsu:
        logger.info("Otsu threshold: %d", get_by_otsu_method(histogram))
    if args.plot:
        logger.info("Chart saved to %s", args.plot)
    return 0
