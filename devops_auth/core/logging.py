"""
Logging setup for hosts embedding the credential helpers.

Credential helpers usually speak a line protocol on stdout, so diagnostics go
to stderr and only the ``devops_auth`` logger tree is configured. The host's
root logger is left alone.
"""

import logging
import sys
from typing import IO, Optional

PACKAGE_LOGGER = "devops_auth"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> logging.Logger:
    """Attach a single stderr handler to the package logger and set its level.

    Calling it again replaces the handler installed by an earlier call.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if getattr(handler, "_devops_auth_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._devops_auth_handler = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())
    return package_logger


__all__ = ["LOG_FORMAT", "PACKAGE_LOGGER", "configure_logging"]
