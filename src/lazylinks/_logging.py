"""Logging configuration for lazylinks.

Modules log through the standard library:

    import logging
    log = logging.getLogger(__name__)

The level can be set with the LAZYLINKS_LOG_LEVEL environment variable
(DEBUG, INFO, WARNING, ERROR). The `debug_mode` config flag lowers it to
DEBUG at runtime, which surfaces index rebuild statistics.
"""

import logging
import os
import sys

PACKAGE_LOGGER = "lazylinks"


def configure_logging(level: str | None = None) -> None:
    """Configure logging for the lazylinks package.

    Call this once at application startup (the CLI does). Subsequent calls
    are no-ops.

    Args:
        level: Level name overriding LAZYLINKS_LOG_LEVEL.
    """
    root_logger = logging.getLogger(PACKAGE_LOGGER)

    if root_logger.handlers:
        return

    level_name = (level or os.environ.get("LAZYLINKS_LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            fmt="[%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel(resolved)
    root_logger.addHandler(handler)

    # Avoid duplicate messages through the root logger
    root_logger.propagate = False


def set_debug(enabled: bool) -> None:
    """Toggle DEBUG output for the package logger."""
    root_logger = logging.getLogger(PACKAGE_LOGGER)
    if enabled:
        root_logger.setLevel(logging.DEBUG)
    elif root_logger.level == logging.DEBUG:
        root_logger.setLevel(logging.INFO)
