"""Shared loguru logger for the bandit package."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

PACKAGE = "bayesbandit"
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} [{level}] {name}: {message}"

# silent as a library until the application opts in
logger.disable(PACKAGE)


def configure_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """Enable package logging with a stderr sink at ``level`` and an optional rotating file."""
    logger.enable(PACKAGE)
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, level=level, format=LOG_FORMAT, rotation="1 day")
        logger.debug("File logging enabled at {}", path)


__all__ = ["logger", "configure_logging"]
