"""Logger configuration for RowPlan."""

import os
import sys

from loguru import logger


def setup_logger(level: str | None = None) -> None:
    """Configure loguru with a single coloured console sink.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to
            ROWPLAN_LOG_LEVEL from the environment, else INFO.
    """
    level = (level or os.getenv("ROWPLAN_LOG_LEVEL", "INFO")).upper()

    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    logger.debug(f"Logger initialized with level={level}")
