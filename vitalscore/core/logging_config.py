"""
Logging setup for processes embedding the scoring engine.

Engine modules only create module loggers; the host process decides where
records go by calling configure_logging() once at startup.
"""

import logging
import sys
from typing import Optional

from vitalscore.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure root logging with a stdout handler and an optional file handler."""
    handlers = [logging.StreamHandler(sys.stdout)]
    target_file = log_file or settings.LOG_FILE
    if target_file:
        handlers.append(logging.FileHandler(target_file))

    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
