"""Logging configuration for RagSearch."""

import sys
from typing import Any, Optional

from loguru import logger

VERBOSE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
COMPACT_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


def setup_logging(verbose: bool = False, sink: Optional[Any] = None) -> int:
    """Replace loguru's default handler with a RagSearch one.

    Args:
        verbose: DEBUG level with source locations instead of compact INFO
        sink: Destination for log records (defaults to stderr)

    Returns:
        The loguru handler id
    """
    logger.remove()

    return logger.add(
        sink if sink is not None else sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=VERBOSE_FORMAT if verbose else COMPACT_FORMAT,
    )
