"""Logging setup shared by the rasterkit command line tools.

Engines only ever call ``logging.getLogger(__name__)``; the handlers, level
and format are decided here, once, by the entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterable, Iterator

from tqdm.contrib.logging import logging_redirect_tqdm

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

LOG_LEVEL_CHOICES: Iterable[str] = tuple(LOG_LEVELS.keys())


def add_logging_args(parser) -> None:
    """Add --log-level, -v and -q to an argparse parser."""
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        help="Set log verbosity explicitly (overrides -v/-q)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="More output; -v shows engine decisions such as chosen thresholds",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="count",
        default=0,
        help="Less output (use -qq for errors only)",
    )


def resolve_log_level(
    log_level: str | None = None,
    verbose: int = 0,
    quiet: int = 0,
) -> int:
    """Turn the logging flags into a numeric level.

    An explicit ``log_level`` wins. Otherwise INFO is shifted one step per
    -v (down to DEBUG) or -q (up to ERROR).
    """
    if log_level:
        try:
            return LOG_LEVELS[log_level.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown log level '{log_level}'. "
                f"Expected one of: {', '.join(LOG_LEVEL_CHOICES)}"
            ) from None

    offset = verbose - quiet
    if offset >= 1:
        return logging.DEBUG
    if offset == 0:
        return logging.INFO
    if offset == -1:
        return logging.WARNING
    return logging.ERROR


def configure_logging(
    log_level: str | None = None,
    verbose: int = 0,
    quiet: int = 0,
) -> int:
    """Configure root logging and return the active level.

    Calling it again (tests, nested entry points) only adjusts the level of
    the handlers already installed.
    """
    level = resolve_log_level(log_level=log_level, verbose=verbose, quiet=quiet)
    root_logger = logging.getLogger()

    if root_logger.handlers:
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)
        return level

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
    )
    return level


@contextmanager
def progress_logging() -> Iterator[None]:
    """Route log records through tqdm while a progress bar is on screen.

    Without this, log lines written during a batch run tear the bar apart.
    """
    with logging_redirect_tqdm():
        yield
