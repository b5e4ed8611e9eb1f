"""Kernels command: list the predefined convolution kernels."""

from __future__ import annotations

import argparse
import logging

from processing.kernels import ConvolutionType, get_convolution_matrix

logger = logging.getLogger(__name__)


def add_kernels_subparser(subparsers: argparse._SubParsersAction) -> None:
    kernels_parser = subparsers.add_parser(
        "kernels",
        help="List available convolution kernels",
    )
    kernels_parser.add_argument(
        "--show",
        action="store_true",
        help="Also print each kernel's matrix",
    )
    kernels_parser.set_defaults(_cmd=cmd_kernels)


def cmd_kernels(args: argparse.Namespace) -> int:
    for kernel in ConvolutionType:
        try:
            matrix = get_convolution_matrix(kernel)
        except NotImplementedError:
            logger.info("%-28s %s (no matrix)", kernel.value, kernel.description)
            continue
        logger.info("%-28s %s %dx%d", kernel.value, kernel.description, *matrix.shape)
        if args.show:
            # Stored [x, y]; transpose to print image rows
            for row in matrix.T:
                logger.info("    %s", " ".join(f"{v:4d}" for v in row))
    return 0
