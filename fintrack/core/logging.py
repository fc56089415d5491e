"""
Logging setup for Fintrack.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Install a single stream handler on the root logger.

    Safe to call more than once (tests build several apps); the handler is
    only added the first time.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if any(getattr(h, "_fintrack", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._fintrack = True
    root.addHandler(handler)
