"""
CLI logging setup.

Hook commands own stdout (it carries the payload or message), so all
diagnostics go to stderr. Quiet by default; DEBUG or --verbose shows the
lookup trace.
"""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = 'session_hooks'


def configure_logging(debug: bool = False) -> logging.Logger:
    """
    Route package logs to stderr.

    Args:
        debug: If True, show debug trace lines. If False, only warnings/errors.

    Returns:
        The package logger
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False
    return logger
