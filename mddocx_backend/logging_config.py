"""Loguru setup: one stdout sink, human-readable or serialized JSON."""

from __future__ import annotations

import logging
import sys

from loguru import logger


def setup_logging(log_level: str = "INFO", enable_json: bool = False) -> None:
    """Replace loguru's default sink.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        enable_json: serialize records as JSON (one object per line)
    """
    logger.remove()

    if enable_json:
        logger.add(sys.stdout, level=log_level, colorize=False, serialize=True)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>"
            ),
            level=log_level,
            colorize=True,
        )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
