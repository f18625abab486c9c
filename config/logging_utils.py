"""Logging helpers for the allocation platform."""

import logging
from pathlib import Path
from typing import Optional

from config.defaults import LOG_DATE_FORMAT, LOG_FORMAT, LOG_LEVEL


def configure_logging(level: int = LOG_LEVEL, log_path: Optional[str] = None) -> None:
    """Configure default logging if no handlers are present."""
    root = logging.getLogger()
    if root.handlers:
        return
    handlers = [logging.StreamHandler()]

    if log_path:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
    )
