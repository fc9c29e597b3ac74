"""Logging setup."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

# Chatty third-party loggers, quiet unless verbose
_NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Configure root logging with a Rich handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        verbose: Show timestamps, source paths and third-party debug output
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = RichHandler(
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
