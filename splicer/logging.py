"""
splicer.logging - Centralized logging configuration.

Every module logs through a child of the ``splicer`` logger so hosts can
silence or redirect the engine with a single handler.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("splicer")


def get_logger(name: str) -> logging.Logger:
    """Return the ``splicer.<name>`` child logger."""
    return logger.getChild(name)


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI.

    Args:
        verbose: If True, show DEBUG output (every edit and tick); otherwise WARNING
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s [%(name)s] %(message)s",
    )
    logger.setLevel(level)
