"""Batch command: apply one recipe to every image in a directory."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from tqdm import tqdm

from config import BATCH_EXTENSIONS
from logging_utils import progress_logging
from processing import ProcessConfig, run_pipeline
from raster.codec import load_image, save_image
from .recipe import load_recipe

logger = logging.getLogger(__name__)


def find_images(input_dir: Path, recursive: bool = False) -> list[Path]:
    """Image files under ``input_dir`` in sorted order."""
    pattern = "**/*" if recursive else "*"
    return sorted(
        path for path in input_dir.glob(pattern)
        if path.is_file() and path.suffix.lower() in BATCH_EXTENSIONS
    )


def output_path_for(source: Path, input_dir: Path, output_dir: Path, suffix: str | None) -> Path:
    """Mirror ``source``'s place under ``input_dir`` inside ``output_dir``."""
    target = output_dir / source.relative_to(input_dir)
    if suffix:
        target = target.with_suffix(suffix if suffix.startswith(".") else f".{suffix}")
    return target


def run_batch(
    input_dir: Path,
    output_dir: Path,
    config: ProcessConfig,
    recursive: bool = False,
    suffix: str | None = None,
    keep_going: bool = False,
) -> dict[str, int]:
    """Process every image under ``input_dir`` into ``output_dir``.

    Args:
        input_dir: Directory to read images from.
        output_dir: Directory to write results to (created as needed).
        config: Pipeline configuration applied to every image.
        recursive: Descend into subdirectories.
        suffix: Output container suffix; None keeps each input's suffix.
        keep_going: Log failing images and continue instead of stopping.

    Returns:
        Counts for ``found``, ``processed`` and ``failed`` images.

    Raises:
        ValueError: If ``input_dir`` is not a directory.
        OSError: If an image fails and ``keep_going`` is False.
    """
    if not input_dir.is_dir():
        raise ValueError(f"Not a directory: {input_dir}")

    images = find_images(input_dir, recursive=recursive)
    stats = {"found": len(images), "processed": 0, "failed": 0}
    logger.info("Found %d images in %s", len(images), input_dir)

    with progress_logging():
        for source in tqdm(images, desc="Processing"):
            target = output_path_for(source, input_dir, output_dir, suffix)
            try:
                result = run_pipeline(load_image(source), config)
                save_image(result.image, target)
            except (ValueError, OSError) as exc:
                if not keep_going:
                    raise
                logger.warning("Skipping %s: %s", source, exc)
                stats["failed"] += 1
                continue
            logger.debug("%s -> %s %s", source, target, result.metadata or "")
            stats["processed"] += 1

    return stats


def add_batch_subparser(subparsers: argparse._SubParsersAction) -> None:
    batch_parser = subparsers.add_parser(
        "batch",
        help="Apply a recipe to every image in a directory",
    )
    batch_parser.add_argument("input_dir", help="Directory of images to process")
    batch_parser.add_argument("output_dir", help="Directory to write results to")
    batch_parser.add_argument(
        "--recipe",
        required=True,
        metavar="FILE",
        help="YAML recipe applied to every image",
    )
    batch_parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Include images in subdirectories",
    )
    batch_parser.add_argument(
        "--suffix",
        help="Write outputs with this suffix, e.g. png (default: keep the input's)",
    )
    batch_parser.add_argument(
        "-k", "--keep-going",
        action="store_true",
        help="Skip images that fail instead of stopping",
    )
    batch_parser.set_defaults(_cmd=cmd_batch)


def cmd_batch(args: argparse.Namespace) -> int:
    try:
        config = load_recipe(args.recipe).to_config()
        stats = run_batch(
            Path(args.input_dir),
            Path(args.output_dir),
            config,
            recursive=args.recursive,
            suffix=args.suffix,
            keep_going=args.keep_going,
        )
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    logger.info("%s", "=" * 40)
    logger.info("Images found:     %s", stats["found"])
    logger.info("Images processed: %s", stats["processed"])
    logger.info("Images failed:    %s", stats["failed"])
    return 1 if stats["failed"] else 0
