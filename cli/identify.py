"""Identify command: report container types from file signatures."""

from __future__ import annotations

import argparse
import logging

from raster.encoding import ImageType, try_get_image_type

logger = logging.getLogger(__name__)

# Longest known signature is 10 bytes (JPEG/JFIF)
HEADER_SIZE = 16


def identify_file(path: str) -> ImageType:
    """Return the container type of ``path`` judged by its first bytes.

    Raises:
        OSError: If the file cannot be read.
    """
    with open(path, "rb") as f:
        return try_get_image_type(f.read(HEADER_SIZE))


def add_identify_subparser(subparsers: argparse._SubParsersAction) -> None:
    identify_parser = subparsers.add_parser(
        "identify",
        help="Print the container type of image files from their magic bytes",
    )
    identify_parser.add_argument("files", nargs="+", metavar="FILE", help="Files to check")
    identify_parser.set_defaults(_cmd=cmd_identify)


def cmd_identify(args: argparse.Namespace) -> int:
    status = 0
    for path in args.files:
        try:
            image_type = identify_file(path)
        except OSError as exc:
            logger.error("%s", exc)
            status = 1
            continue
        logger.info("%-8s %s", image_type.value, path)
    return status
