"""
Log routing for command-line runs.

Modules inside ``cubesim`` only ask for ``logging.getLogger(__name__)``;
nothing is routed anywhere until a runner calls ``setup_logging``.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional


PACKAGE_LOGGER = "cubesim"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """Send ``cubesim`` records at ``level`` or above to stdout, and to ``log_file`` when given."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Calling this again replaces the previous handlers.
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging initialized.")
