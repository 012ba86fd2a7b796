"""
Logging configuration for sticky_plan processes.

The store owner logs to stderr and optionally a rotating file. Note and home
windows are full-screen terminal apps, so they only ever get the file sink.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def configure_logging(level: str = "INFO", log_file: Optional[str] = None, console: bool = True,
                      rotation: str = "10 MB", retention: str = "7 days") -> None:
    """
    Replace loguru's default handler with the sinks for this process.

    This should be called once at startup.
    """
    logger.remove()  # Remove default handler

    if console:
        logger.add(
            sink=sys.stderr,
            level=level,
            colorize=True,
        )

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            sink=str(log_path),
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            enqueue=True,
        )

    logger.debug(f"Logging configured: level={level}, console={console}, file={log_file or '-'}")
